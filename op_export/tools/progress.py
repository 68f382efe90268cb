from __future__ import annotations

import logging
import threading
import time

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Logs "N items still to go", at most once per `interval_seconds`."""

    def __init__(self, total: int, interval_seconds: float = 1.0) -> None:
        self.pending = total
        self.interval_seconds = interval_seconds
        self._last_report = time.monotonic()
        self._lock = threading.Lock()

    def done(self) -> None:
        with self._lock:
            self.pending -= 1
            if self.pending <= 0:
                return
            now = time.monotonic()
            if now - self._last_report >= self.interval_seconds:
                self._last_report = now
                logger.info("%d items still to go", self.pending)
