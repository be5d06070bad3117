"""
OpenWeather API Client - Current weather over the REST API.
"""
import logging
from typing import Optional

import requests

from ..models import Location, WeatherReport
from ..config import OPENWEATHER_URL, OPENWEATHER_UNITS

logger = logging.getLogger(__name__)


class OpenWeatherAPI:
    """REST client for the OpenWeatherMap current weather endpoint."""

    def __init__(self, api_key: str, base_url: str = OPENWEATHER_URL, timeout: float = 10):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers['Accept'] = 'application/json'

    def fetch(self, location: Location) -> Optional[WeatherReport]:
        """Fetch current weather for a location. Returns None on any failure."""
        params = {
            'lat': location.latitude,
            'lon': location.longitude,
            'units': OPENWEATHER_UNITS,
            'appid': self.api_key,
        }
        logger.info(f'Fetching weather for {location.latitude:.4f}, {location.longitude:.4f}')
        try:
            resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f'Weather request failed: {e}')
            return None

        if not resp.ok:
            logger.warning(f'Weather request failed: {resp.status_code} {resp.text[:200]}')
            return None

        try:
            return self.parse(resp.json())
        except ValueError as e:
            logger.error(f'Invalid weather response: {e}')
            return None

    @staticmethod
    def parse(payload) -> WeatherReport:
        """Decode `{"name": ..., "main": {"temp": ...}}`. Raises ValueError if malformed."""
        try:
            name = payload['name']
            temp = payload['main']['temp']
        except (KeyError, TypeError) as e:
            raise ValueError(f'missing field {e}') from e
        if not isinstance(name, str):
            raise ValueError(f'city name is not a string: {name!r}')
        try:
            temperature = float(temp)
        except (TypeError, ValueError) as e:
            raise ValueError(f'temperature is not a number: {temp!r}') from e
        return WeatherReport(city_name=name, temperature=temperature)

    def close(self):
        self.session.close()


class NullWeatherAPI:
    """Offline stand-in used in mock mode."""

    def __init__(self, city_name: str = 'Budapest', temperature: float = 18.0):
        self.city_name = city_name
        self.temperature = temperature

    def fetch(self, location: Location) -> Optional[WeatherReport]:
        logger.debug(f'Mock weather for {location}')
        return WeatherReport(city_name=self.city_name, temperature=self.temperature)

    def close(self):
        pass
