"""
Tick Timer - Cancellable repeating timer for story progress.
"""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TickTimer:
    """Calls `callback` every `interval` seconds on a daemon thread until cancelled."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def running(self) -> bool:
        return self._thread is not None

    def start(self):
        """Start ticking. No-op if already running."""
        with self._lock:
            if self._thread is not None:
                return
            # Each run gets its own event so a restart never revives an old thread
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop_event,), daemon=True
            )
            self._thread.start()
        logger.debug(f'Tick timer started ({self.interval * 1000:.0f}ms)')

    def cancel(self):
        """Stop ticking. Safe to call any number of times."""
        with self._lock:
            if self._thread is None:
                return
            self._stop_event.set()
            self._thread = None
            self._stop_event = None
        logger.debug('Tick timer cancelled')

    def _run(self, stop_event: threading.Event):
        while not stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.warning(f'Tick callback failed: {e}', exc_info=True)
