"""
Location Providers - Where the device is, for the weather lookup.
"""
import logging
from typing import Callable, Optional

import requests

from ..models import Location
from ..config import GEOLOCATION_URL, FALLBACK_LATITUDE, FALLBACK_LONGITUDE
from ..utils import run_async

logger = logging.getLogger(__name__)

LocationCallback = Callable[[Optional[Location]], None]


class LocationProvider:
    """
    Base provider. Call `refresh()` to request a location; the result (or
    None when it could not be determined) arrives through `on_location`.
    """

    def __init__(self, on_location: Optional[LocationCallback] = None):
        self.on_location = on_location
        self.last_location: Optional[Location] = None
        self.is_process_complete = False

    def refresh(self, is_connected: bool = True):
        raise NotImplementedError

    def stop(self):
        """Stop any pending lookup; late results are dropped."""
        self.is_process_complete = True
        logger.debug(f'{type(self).__name__}: updates stopped')

    def _deliver(self, location: Optional[Location]):
        if location is not None:
            self.last_location = location
        self.is_process_complete = True
        if self.on_location:
            self.on_location(location)


class StaticLocationProvider(LocationProvider):
    """Always reports the configured coordinates."""

    def __init__(self, location: Optional[Location] = None,
                 on_location: Optional[LocationCallback] = None):
        super().__init__(on_location)
        self.location = location or Location(FALLBACK_LATITUDE, FALLBACK_LONGITUDE)

    def refresh(self, is_connected: bool = True):
        self.is_process_complete = False
        logger.info(f'Using static location {self.location.latitude}, {self.location.longitude}')
        self._deliver(self.location)


class IPLocationProvider(LocationProvider):
    """Approximate location from the public IP address."""

    def __init__(self, url: str = GEOLOCATION_URL,
                 on_location: Optional[LocationCallback] = None,
                 runner=run_async, timeout: float = 5):
        super().__init__(on_location)
        self.url = url
        self.runner = runner
        self.timeout = timeout
        self.session = requests.Session()

    def refresh(self, is_connected: bool = True):
        self.is_process_complete = False
        if not is_connected:
            logger.info('Location: not looking up location without a network connection')
            return
        self.runner(self._lookup)

    def _lookup(self):
        location = self.lookup()
        if self.is_process_complete:
            logger.debug('Location: lookup finished after stop, dropped')
            return
        self._deliver(location)

    def lookup(self) -> Optional[Location]:
        """Blocking geolocation request. Returns None on failure."""
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            logger.warning(f'Location lookup failed: {e}')
            return None
        except ValueError as e:
            logger.warning(f'Invalid location response: {e}')
            return None

        if not isinstance(data, dict) or data.get('status', 'success') != 'success':
            logger.warning(f'Location lookup rejected: {data!r:.200}')
            return None
        try:
            location = Location(float(data['lat']), float(data['lon']))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f'Location response missing coordinates: {e}')
            return None

        logger.info(f'Location updated to {location.latitude}, {location.longitude}')
        return location
