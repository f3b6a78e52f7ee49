from __future__ import annotations

import logging
import threading
import time

from .exporter import Watcher

logger = logging.getLogger(__name__)


class BackgroundProber:
    """Runs the watcher's probe cycle on a fixed interval.

    Decouples probing from scrapes: the watcher is built with
    interval_driven=True and scrapes only render the last observations."""

    def __init__(self, watcher: Watcher, interval_secs: float) -> None:
        if interval_secs <= 0:
            raise ValueError("interval_secs must be positive")
        self._watcher = watcher
        self._interval = interval_secs
        self._stopped = threading.Event()

    @property
    def running(self) -> bool:
        return not self._stopped.is_set()

    def start(self) -> None:
        """Begin the probe loop (blocking; run in a daemon thread).

        Returns at once if stop() was already called."""
        while not self._stopped.is_set():
            started = time.monotonic()
            self.run_once()
            elapsed = time.monotonic() - started
            self._stopped.wait(max(0.0, self._interval - elapsed))

    def stop(self) -> None:
        """Signal the loop to stop after the current cycle."""
        self._stopped.set()

    def run_once(self) -> None:
        try:
            self._watcher.probe()
        except Exception:  # noqa: BLE001
            logger.exception("probe cycle failed")
