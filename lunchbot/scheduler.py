"""
Periodic background tasks: proposal cleanup and state backup.
"""

import logging
import math
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Runs `action` every `interval` seconds in a daemon thread until stopped."""

    def __init__(self, name: str, interval: float, action: Callable[[], object]):
        if not math.isfinite(interval) or interval <= 0:
            raise ValueError(f"interval must be positive and finite, got {interval}")
        self.name = name
        self.interval = interval
        self.action = action
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.info(f"Started periodic task '{self.name}' (every {self.interval}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        # wait() returns True once stop() is called
        while not self._stop_event.wait(self.interval):
            try:
                self.action()
            except Exception:
                logger.exception(f"Periodic task '{self.name}' failed")
