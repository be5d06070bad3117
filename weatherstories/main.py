#!/usr/bin/env python3
"""
WeatherStories - Weather display with a Stories-style image carousel.

Usage:
    python -m weatherstories              # Windowed (development)
    python -m weatherstories --fullscreen # Fullscreen
    python -m weatherstories --mock       # Mock mode (no network needed)
"""
import sys
import logging
import platform
from logging.handlers import RotatingFileHandler

from .config import (
    SCREEN_WIDTH, SCREEN_HEIGHT,
    OPENWEATHER_URL, MOCK_MODE, FULLSCREEN, LOCATION_MODE,
    LOG_DIR, LOG_FILE, LOG_MAX_BYTES, LOG_BACKUP_COUNT,
    LOG_LEVEL, LOG_FORMAT, QUIET_LOGGERS,
)
from .app import WeatherStories

CONTROLS = (
    ('Enter', 'Open stories'),
    ('- / +', 'Story transition time'),
    ('Space', 'Pause/Resume (stories)'),
    ('Left/Right', 'Previous/next slide'),
    ('Esc', 'Close stories / Quit'),
)


def _handler(handler: logging.Handler, level: int, datefmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=datefmt))
    return handler


def setup_logging(level_name: str = LOG_LEVEL):
    """Console at the requested level, rotating file at DEBUG."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.addHandler(_handler(logging.StreamHandler(sys.stdout),
                             getattr(logging, level_name, logging.INFO), '%H:%M:%S'))

    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES,
                                       backupCount=LOG_BACKUP_COUNT, encoding='utf-8')
    except OSError as e:
        root.warning(f'File logging disabled ({LOG_FILE}): {e}')
    else:
        root.addHandler(_handler(rotating, logging.DEBUG, '%Y-%m-%d %H:%M:%S'))
        root.info(f'Writing log file {LOG_FILE}')

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def main():
    """Entry point for the WeatherStories application."""
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info(f'WeatherStories starting (Python {sys.version.split()[0]}, '
                f'{platform.system()} {platform.release()})')
    logger.info(f'Display {SCREEN_WIDTH}x{SCREEN_HEIGHT}, fullscreen={FULLSCREEN}')
    if MOCK_MODE:
        logger.info('Weather source: mock data, network checks disabled')
    else:
        logger.info(f'Weather source: {OPENWEATHER_URL} (location: {LOCATION_MODE})')

    print('\nControls:')
    for key, label in CONTROLS:
        print(f'   {key:<11}{label}')
    print()

    WeatherStories(fullscreen=FULLSCREEN).start()


if __name__ == '__main__':
    main()
