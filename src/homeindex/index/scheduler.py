"""Periodic bulk scans."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Callable

from homeindex.index.indexer import Indexer

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL = 6 * 3600.0


def seconds_until_next_run(now: datetime, interval: float) -> float:
    """Seconds until the next multiple of ``interval`` after local midnight."""
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    elapsed = (now - midnight).total_seconds()
    remaining = interval - (elapsed % interval)
    return remaining if remaining > 0 else interval


class ScanScheduler:
    """Fire ``Indexer.scan_and_ingest_all`` on a fixed wall-clock interval.

    The scheduler holds no lock of its own. Each firing runs on a fresh worker
    thread and overlapping firings are turned into no-ops by the indexer.
    """

    def __init__(
        self,
        indexer: Indexer,
        *,
        interval: float = DEFAULT_INTERVAL,
        run_on_start: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.indexer = indexer
        self.interval = interval
        self.run_on_start = run_on_start
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._worker: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="homeindex-scheduler", daemon=True)
        self._thread.start()
        LOGGER.info("Scheduled automatic scanning every %.1f hours", self.interval / 3600)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the loop and wait for the latest scan worker to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
            if worker.is_alive():
                LOGGER.warning("Scan worker still running after %s seconds", timeout)
            else:
                self._worker = None

    def next_delay(self) -> float:
        return seconds_until_next_run(self._clock(), self.interval)

    def _loop(self) -> None:
        if self.run_on_start:
            self.trigger()
        while not self._stop.wait(self.next_delay()):
            self.trigger()

    def trigger(self) -> threading.Thread:
        """Start a scan on a worker thread and return the thread."""
        worker = threading.Thread(target=self.run_scan, name="homeindex-scan", daemon=True)
        worker.start()
        self._worker = worker
        return worker

    def run_scan(self) -> None:
        LOGGER.info("Starting scheduled document scan...")
        try:
            self.indexer.scan_and_ingest_all()
        except Exception:
            LOGGER.exception("Scheduled scan failed")
