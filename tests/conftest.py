"""
Pytest configuration and shared fixtures for WeatherStories tests.
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from weatherstories.models import WeatherReport
from weatherstories.managers.story import StoryPlayer
from weatherstories.utils import run_sync


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeTimer:
    """Tick source that records start/cancel calls and fires on demand."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.running = False
        self.start_count = 0
        self.cancel_count = 0

    def start(self):
        self.start_count += 1
        self.running = True

    def cancel(self):
        self.cancel_count += 1
        self.running = False

    def fire(self):
        if self.running:
            self.callback()


class FakeTimerFactory:
    """Collects every timer a player creates."""

    def __init__(self):
        self.created = []

    def __call__(self, interval, callback):
        timer = FakeTimer(interval, callback)
        self.created.append(timer)
        return timer

    @property
    def timer(self):
        return self.created[-1] if self.created else None


class FakeNetwork:
    """NetworkMonitor stand-in with a settable status."""

    def __init__(self, connected: bool = True):
        self.is_connected = connected
        self.on_change = None
        self.started = 0
        self.stopped = 0

    def start(self):
        self.started += 1

    def stop(self):
        self.stopped += 1

    def flip(self, connected: bool):
        self.is_connected = connected
        if self.on_change:
            self.on_change(connected)


class FakeLocationProvider:
    """Location provider that only delivers when the test says so."""

    def __init__(self):
        self.on_location = None
        self.refresh_calls = []
        self.stopped = False

    def refresh(self, is_connected: bool = True):
        self.refresh_calls.append(is_connected)

    def stop(self):
        self.stopped = True

    def deliver(self, location):
        self.on_location(location)


class FakeWeatherAPI:
    """Returns a preset report and records requested locations."""

    def __init__(self, report=None):
        self.report = report
        self.requests = []
        self.closed = False

    def fetch(self, location):
        self.requests.append(location)
        return self.report

    def close(self):
        self.closed = True


class MemoryCache:
    """In-memory WeatherCache."""

    def __init__(self, report=None, fail: bool = False):
        self.report = report
        self.fail = fail
        self.saved = []

    def load(self):
        return self.report

    def save(self, report):
        if self.fail:
            return False
        self.report = report
        self.saved.append(report)
        return True


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that's cleaned up after each test."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def cache_path(temp_dir):
    """Provide path for a temporary weather cache file."""
    return temp_dir / 'weather_cache.json'


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def make_player(clock, timers):
    """Build story players on the fake clock and timers."""
    def factory(slides=('image1', 'image2', 'image3'), transition_duration=3.0):
        return StoryPlayer(slides, transition_duration, clock=clock, timer_factory=timers)
    return factory


@pytest.fixture
def player(make_player):
    """Three slides, three seconds each."""
    return make_player()


@pytest.fixture
def sample_report():
    return WeatherReport(city_name='San Francisco', temperature=18.0, timestamp=1700000000.0)


@pytest.fixture
def network():
    return FakeNetwork(connected=True)


@pytest.fixture
def location_provider():
    return FakeLocationProvider()


@pytest.fixture
def weather_api(sample_report):
    return FakeWeatherAPI(sample_report)


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def make_orchestrator(weather_api, memory_cache, location_provider, network):
    """Build an orchestrator whose fetches run inline."""
    from weatherstories.managers.weather import WeatherOrchestrator

    def factory(has_api_key=True, cache=None, api=None, **kwargs):
        kwargs.setdefault('runner', run_sync)
        return WeatherOrchestrator(
            api=api or weather_api,
            cache=cache or memory_cache,
            location_provider=location_provider,
            network_monitor=network,
            has_api_key=lambda: has_api_key,
            **kwargs,
        )
    return factory
