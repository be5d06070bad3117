"""
Network Monitor - Background reachability checks.
"""
import logging
import threading
from typing import Callable, Optional

import requests

from ..config import NETWORK_CHECK_URL, NETWORK_CHECK_INTERVAL, NETWORK_CHECK_TIMEOUT

logger = logging.getLogger(__name__)


class NetworkMonitor:
    """Polls a URL in a daemon thread and reports connectivity changes."""

    def __init__(self,
                 on_change: Optional[Callable[[bool], None]] = None,
                 check_url: str = NETWORK_CHECK_URL,
                 interval: float = NETWORK_CHECK_INTERVAL,
                 timeout: float = NETWORK_CHECK_TIMEOUT,
                 probe: Optional[Callable[[], bool]] = None):
        """
        Args:
            on_change: Called with the new status whenever it flips
            check_url: Any URL that answers when the internet is reachable
            interval: Seconds between probes
            timeout: Probe timeout in seconds
            probe: Replaces the HTTP probe (mock mode)
        """
        self.on_change = on_change
        self.check_url = check_url
        self.interval = interval
        self.timeout = timeout
        self.probe = probe
        self._connected = False
        self._connected_lock = threading.Lock()
        self._stop_event: Optional[threading.Event] = None
        self.thread: Optional[threading.Thread] = None

    @property
    def is_connected(self) -> bool:
        with self._connected_lock:
            return self._connected

    def start(self):
        """Start probing in a background thread. No-op if already running."""
        if self._stop_event is not None and not self._stop_event.is_set():
            return
        # Fresh event per run; the previous thread may still be winding down
        self._stop_event = threading.Event()
        self.thread = threading.Thread(target=self._run, args=(self._stop_event,), daemon=True)
        self.thread.start()
        logger.info(f'Started network monitor: {self.check_url}')

    def stop(self):
        """Stop probing."""
        if self._stop_event is None or self._stop_event.is_set():
            return
        self._stop_event.set()
        logger.info('Stopped network monitor')

    def check(self) -> bool:
        """Single reachability probe."""
        if self.probe is not None:
            return self.probe()
        try:
            requests.head(self.check_url, timeout=self.timeout, allow_redirects=False)
            return True
        except requests.RequestException as e:
            logger.debug(f'Network probe failed: {e}')
            return False

    def update(self, connected: bool):
        """Record a probe result and notify on change."""
        with self._connected_lock:
            changed = connected != self._connected
            self._connected = connected
        if not changed:
            return
        logger.info(f'Network {"connected" if connected else "disconnected"}')
        if self.on_change:
            self.on_change(connected)

    def _run(self, stop_event: threading.Event):
        while not stop_event.is_set():
            try:
                self.update(self.check())
            except Exception as e:
                logger.warning(f'Network monitor error: {e}', exc_info=True)
            stop_event.wait(self.interval)
