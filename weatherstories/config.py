"""
WeatherStories Configuration - All constants and settings.
"""
import os
import sys
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# ============================================
# SCREEN & DISPLAY
# ============================================

SCREEN_WIDTH = 480
SCREEN_HEIGHT = 800

# ============================================
# WEATHER SERVICE
# ============================================

OPENWEATHER_URL = os.environ.get(
    'OPENWEATHER_URL', 'https://api.openweathermap.org/data/2.5/weather'
)
OPENWEATHER_API_KEY_PLACEHOLDER = 'ADD_OPENWEATHERMAP_API_KEY_HERE'
OPENWEATHER_UNITS = 'metric'

# IP geolocation (used when LOCATION_MODE == 'ip')
GEOLOCATION_URL = os.environ.get('GEOLOCATION_URL', 'http://ip-api.com/json')

# ============================================
# PATHS
# ============================================

DATA_DIR = Path(os.environ.get('WEATHERSTORIES_DATA', Path(__file__).parent.parent / 'data'))
CACHE_PATH = DATA_DIR / 'weather_cache.json'
STORIES_DIR = DATA_DIR / 'stories'

# Logging directory
LOG_DIR = Path.home() / 'weatherstories' / 'logs'
LOG_FILE = LOG_DIR / 'weatherstories.log'
LOG_MAX_BYTES = 2 * 1024 * 1024  # 2MB per file
LOG_BACKUP_COUNT = 5
LOG_LEVEL = os.environ.get('WEATHERSTORIES_LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Third-party loggers kept at WARNING
QUIET_LOGGERS = ('urllib3', 'requests', 'PIL')

# ============================================
# COMMAND LINE FLAGS
# ============================================

MOCK_MODE = '--mock' in sys.argv or '-m' in sys.argv
FULLSCREEN = '--fullscreen' in sys.argv or '-f' in sys.argv

# ============================================
# LOCATION
# ============================================

# 'ip' looks the location up over HTTP, 'static' always uses the fallback
LOCATION_MODE = os.environ.get('WEATHERSTORIES_LOCATION', 'ip')

# Budapest, Hungary
FALLBACK_LATITUDE = float(os.environ.get('WEATHERSTORIES_LAT', '47.4979'))
FALLBACK_LONGITUDE = float(os.environ.get('WEATHERSTORIES_LON', '19.0402'))

# ============================================
# COLORS
# ============================================

COLORS = {
    'bg_primary': (13, 13, 13),
    'bg_secondary': (26, 26, 26),
    'bg_elevated': (40, 40, 40),
    'accent': (10, 132, 255),
    'text_primary': (255, 255, 255),
    'text_secondary': (160, 160, 160),
    'text_muted': (96, 96, 96),
    'segment_track': (110, 110, 110),
    'error': (232, 80, 80),
}

# ============================================
# LAYOUT & SIZES
# ============================================

SEGMENT_HEIGHT = 4
SEGMENT_SPACING = 4
SEGMENT_MARGIN = 8
STORY_TOP = 40          # Below the back label
BUTTON_WIDTH = 260
BUTTON_HEIGHT = 64

# ============================================
# STORIES
# ============================================

DEFAULT_STORY_IMAGES = [
    'person.crop.circle',
    'person.crop.circle.fill',
    'person.crop.square',
    'person.crop.square.fill',
    'person.crop.rectangle',
]
STORY_IMAGE_EXTENSIONS = ('.png', '.jpg', '.jpeg', '.webp')

# ============================================
# TIMING
# ============================================

DEFAULT_TRANSITION_DURATION = 3.0   # seconds per slide
MIN_TRANSITION_DURATION = 1.0
MAX_TRANSITION_DURATION = 10.0
TRANSITION_DURATION_STEP = 0.5
TICK_INTERVAL = 0.016               # ~60 Hz progress ticks

NETWORK_CHECK_URL = os.environ.get('NETWORK_CHECK_URL', 'https://api.openweathermap.org')
NETWORK_CHECK_INTERVAL = 5.0        # seconds between reachability probes
NETWORK_CHECK_TIMEOUT = 2.0

# ============================================
# TOUCH & GESTURES
# ============================================

DRAG_THRESHOLD = 50       # Exclusive, in pixels
LONG_PRESS_TIME = 0.3     # Time for long press (seconds)
SWIPE_MOVEMENT_THRESHOLD = 15


def get_api_key() -> Optional[str]:
    """Return the OpenWeatherMap API key, or None if it is not configured."""
    api_key = os.environ.get('OPENWEATHERMAP_API_KEY')
    if not api_key:
        logger.warning('OPENWEATHERMAP_API_KEY is not set in the environment')
        return None
    if api_key == OPENWEATHER_API_KEY_PLACEHOLDER:
        logger.warning('Replace the OPENWEATHERMAP_API_KEY placeholder with your API key')
        return None
    return api_key
