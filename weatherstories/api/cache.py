"""
Weather Cache - Last fetched report persisted on disk.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Optional

from ..models import WeatherReport

logger = logging.getLogger(__name__)


class WeatherCache:
    """Single-record JSON store for the most recent weather report."""

    def __init__(self, path: Path):
        self.path = path
        self._lock = threading.Lock()

    def load(self) -> Optional[WeatherReport]:
        """Load the cached report, or None if absent or unreadable."""
        with self._lock:
            if not self.path.exists():
                logger.debug(f'No weather cache at {self.path}')
                return None
            try:
                data = json.loads(self.path.read_text())
                report = WeatherReport.from_dict(data['weather'])
            except json.JSONDecodeError as e:
                logger.warning(f'Invalid JSON in weather cache: {e}')
                return None
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f'Malformed weather cache entry: {e}')
                return None
            except OSError as e:
                logger.error(f'Cannot read weather cache: {e}', exc_info=True)
                return None

        logger.info(f'Cached weather: {report.city_name}, {report.temperature}°C')
        return report

    def save(self, report: WeatherReport) -> bool:
        """Replace the cached report. Returns True on success."""
        payload = json.dumps({'weather': report.to_dict()}, indent=2)
        with self._lock:
            # Write to a temp file first so a crash never leaves half a file
            tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(payload)
                tmp_path.replace(self.path)
            except OSError as e:
                logger.error(f'Failed to save weather cache: {e}', exc_info=True)
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
                return False

        logger.info(f'Weather for {report.city_name} ({report.temperature}°C) cached')
        return True

    def clear(self) -> bool:
        """Remove the cached report."""
        with self._lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                logger.error(f'Failed to clear weather cache: {e}', exc_info=True)
                return False
        return True
