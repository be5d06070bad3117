"""
Weather Orchestrator - Location lookup, weather fetch and cache, driven by connectivity.

Flow when online:  load_weather_data -> location provider -> on_location_changed
                   -> fetch_and_cache_weather -> weather_fetched
Flow when offline: load_cached_weather
"""
import logging
import threading
from typing import Callable, Optional

from ..models import Location, WeatherReport, WeatherState
from ..config import (
    DEFAULT_STORY_IMAGES, DEFAULT_TRANSITION_DURATION,
    MIN_TRANSITION_DURATION, MAX_TRANSITION_DURATION, TRANSITION_DURATION_STEP,
    get_api_key,
)
from ..utils import run_async, clamp
from .story import StoryPlayer

logger = logging.getLogger(__name__)


class WeatherOrchestrator:
    """Coordinates the weather screen's collaborators and owns its state."""

    def __init__(self,
                 api,
                 cache,
                 location_provider,
                 network_monitor,
                 has_api_key: Optional[Callable[[], bool]] = None,
                 runner=run_async,
                 story_images=None,
                 transition_duration: float = DEFAULT_TRANSITION_DURATION):
        """
        Args:
            api: Weather client with fetch(location) -> Optional[WeatherReport]
            cache: WeatherCache-like object with load() / save(report)
            location_provider: LocationProvider; its on_location is wired here
            network_monitor: NetworkMonitor; its on_change is wired here
            has_api_key: Returns False when no usable API key is configured
            runner: How to run the blocking fetch (run_async in the app)
            story_images: Slide tokens for the story screen
            transition_duration: Initial seconds per slide
        """
        self.api = api
        self.cache = cache
        self.location_provider = location_provider
        self.network = network_monitor
        self.has_api_key = has_api_key or (lambda: get_api_key() is not None)
        self.runner = runner
        self._story_images = list(story_images if story_images is not None else DEFAULT_STORY_IMAGES)

        self._lock = threading.RLock()
        self._state = WeatherState(transition_duration=transition_duration)

        self.location_provider.on_location = self.on_location_changed
        self.network.on_change = self.on_network_status_changed

    def snapshot(self) -> WeatherState:
        """Copy of the current state for rendering."""
        with self._lock:
            return self._state.snapshot()

    # ============================================
    # LIFECYCLE
    # ============================================

    def on_appear(self):
        """Weather screen shown for the first time."""
        self.load_story_images()
        self.check_api_key()
        self.set_cached_weather(self.cache.load())
        self.set_offline_status(not self.network.is_connected)
        self.network.start()
        self.load_weather_data()

    def stop(self):
        """Tear down collaborators."""
        self.network.stop()
        self.location_provider.stop()
        self.api.close()
        logger.info('Weather orchestrator stopped')

    def load_story_images(self):
        with self._lock:
            self._state.story_images = list(self._story_images)

    def check_api_key(self):
        missing = not self.has_api_key()
        with self._lock:
            self._state.is_api_key_missing = missing
        if missing:
            logger.warning('No OpenWeatherMap API key: weather fetching disabled')

    # ============================================
    # CACHE
    # ============================================

    def set_cached_weather(self, report: Optional[WeatherReport]):
        with self._lock:
            self._state.cached_weather = report
            self._state.has_no_cached_data = report is None
            if report is None:
                logger.info('No cached weather data available')
                return
            logger.info(f'Cached weather data available for city {report.city_name}')
            if self._state.is_offline:
                self.load_cached_weather()

    def load_cached_weather(self):
        """Show whatever is cached and leave the fetching states."""
        with self._lock:
            state = self._state
            cached = state.cached_weather
            if cached:
                state.weather = cached
                state.show_weather = True
                state.has_no_cached_data = False
                logger.info(f'Cached weather for {cached.city_name} ({cached.temperature}°C) loaded')
            else:
                logger.info('No cached weather data available to load')
                state.has_no_cached_data = True
                state.show_weather = False
            state.is_fetching_location = False
            state.is_fetching_weather = False
            state.status_message = ''

    # ============================================
    # CONNECTIVITY
    # ============================================

    def set_offline_status(self, is_offline: bool):
        with self._lock:
            self._state.is_offline = is_offline
            if is_offline:
                self.load_cached_weather()

    def on_network_status_changed(self, is_connected: bool):
        with self._lock:
            self._state.is_offline = not is_connected
            if is_connected:
                # Allow a fresh fetch after coming back online
                self._state.has_attempted_fetch = False
                self.load_weather_data()
            else:
                self.load_cached_weather()

    # ============================================
    # FETCHING
    # ============================================

    def load_weather_data(self):
        with self._lock:
            state = self._state
            if state.is_api_key_missing:
                return
            if not self.network.is_connected:
                self.load_cached_weather()
                return
            if state.has_attempted_fetch:
                return
            state.has_attempted_fetch = True
            state.is_fetching_location = True
            state.show_weather = False
            state.status_message = 'Fetching location...'

        self.location_provider.refresh(is_connected=True)

    def on_location_changed(self, location: Optional[Location]):
        with self._lock:
            state = self._state
            if location is None:
                if state.is_fetching_location:
                    logger.warning('Location unavailable, falling back to cached weather')
                    self.load_cached_weather()
                return
            if not self.network.is_connected:
                return
            state.is_fetching_location = False
            state.is_fetching_weather = True
            state.show_weather = False
            state.status_message = 'Fetching weather data...'

        self.fetch_and_cache_weather(location)

    def fetch_and_cache_weather(self, location: Location):
        logger.info(f'Fetching weather data for location: {location.latitude}, {location.longitude}')
        self.runner(self._fetch, location)

    def _fetch(self, location: Location):
        self.weather_fetched(self.api.fetch(location))

    def weather_fetched(self, report: Optional[WeatherReport]):
        with self._lock:
            state = self._state
            state.is_fetching_weather = False
            state.status_message = ''
            if report is None:
                logger.warning('Failed to fetch weather data')
                self.load_cached_weather()
                return

            state.weather = report
            state.show_weather = True

        # Disk write happens outside the lock
        if self.cache.save(report):
            with self._lock:
                self._state.cached_weather = report
                self._state.has_no_cached_data = False
            logger.info(f'Weather data city {report.city_name}, and temperature '
                        f'{report.temperature} fetched and cached successfully')
        else:
            logger.error('Unable to cache weather data')

    # ============================================
    # STORIES
    # ============================================

    def update_transition_duration(self, seconds: float) -> float:
        """Set seconds per slide, clamped to the allowed range and snapped to the step."""
        steps = round(seconds / TRANSITION_DURATION_STEP)
        duration = clamp(steps * TRANSITION_DURATION_STEP,
                         MIN_TRANSITION_DURATION, MAX_TRANSITION_DURATION)
        with self._lock:
            self._state.transition_duration = duration
        logger.debug(f'Story transition duration: {duration:.1f}s')
        return duration

    def create_story_player(self, **kwargs) -> StoryPlayer:
        """New story session for the current images and duration."""
        with self._lock:
            images = list(self._state.story_images)
            duration = self._state.transition_duration
        logger.info(f'Opening stories: {len(images)} slides, {duration:.1f}s each')
        return StoryPlayer(images, duration, **kwargs)
