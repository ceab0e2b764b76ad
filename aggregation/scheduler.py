"""Periodic rotation driver: ticks aggregators from a background thread."""

import threading
from collections.abc import Iterable
from datetime import timedelta

import structlog

from config import Settings, configure_logging
from .aggregator import DEFAULT_LATENESS, Aggregator, Timestamp


class RotationScheduler:
    """
    Calls check_rotate() on every registered aggregator each interval so that
    quiet series still flush their windows.

    Aggregators are not thread-safe, so producers on other threads must feed
    samples through add_sample() here (or hold `lock` themselves).
    """

    def __init__(
        self,
        aggregators: Iterable[Aggregator] = (),
        interval_seconds: float = 10.0,
        lateness: timedelta = DEFAULT_LATENESS,
        logger: structlog.BoundLogger | None = None,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._aggregators: list[Aggregator] = list(aggregators)
        self._interval = interval_seconds
        self._lateness = lateness
        self.lock = threading.RLock()
        self.log = logger or structlog.get_logger(component="rotation-scheduler")

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._ticks = 0
        self._errors = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, aggregators: Iterable[Aggregator] = ()
    ) -> "RotationScheduler":
        return cls(
            aggregators,
            interval_seconds=settings.rotate_interval_seconds,
            lateness=settings.lateness,
            logger=configure_logging("rotation-scheduler", settings.log_level),
        )

    def register(self, aggregator: Aggregator):
        with self.lock:
            self._aggregators.append(aggregator)

    def add_sample(self, aggregator: Aggregator, value: float, timestamp: Timestamp):
        with self.lock:
            aggregator.add_sample(value, timestamp)

    def tick(self):
        """Run one rotation pass over every aggregator."""
        with self.lock:
            for aggregator in self._aggregators:
                try:
                    aggregator.check_rotate(self._lateness)
                except Exception as e:
                    self._errors += 1
                    self.log.error(
                        "rotation_error",
                        metric=aggregator.metric,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
            self._ticks += 1

    def _loop(self):
        while not self._stop.wait(self._interval):
            self.tick()

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="rotation-scheduler", daemon=True
        )
        self._thread.start()
        self.log.info(
            "rotation_scheduler_started",
            aggregators=len(self._aggregators),
            interval_sec=self._interval,
            lateness_sec=self._lateness.total_seconds(),
        )

    def stop(self, close: bool = True):
        """Stop ticking; with close=True, flush every aggregator's final window."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if close:
            with self.lock:
                for aggregator in self._aggregators:
                    try:
                        aggregator.close()
                    except Exception as e:
                        self._errors += 1
                        self.log.error(
                            "close_error",
                            metric=aggregator.metric,
                            error_type=type(e).__name__,
                            error=str(e),
                        )
        self.log.info("rotation_scheduler_stopped", ticks=self._ticks, errors=self._errors)

    def __enter__(self) -> "RotationScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stats(self) -> dict[str, int]:
        return {
            "aggregators": len(self._aggregators),
            "ticks": self._ticks,
            "errors": self._errors,
        }
