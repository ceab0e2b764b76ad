"""
Period-rotating aggregator for a single (metric, host, service) series.

Samples are buffered for the open window [period_start, period_start + period).
When a sample or a periodic tick lands strictly after the end of that window,
the window is closed: every statistic is evaluated over the buffered values,
the buffer is cleared, period_start moves to the aligned start of the window
containing the triggering time, and the batch is handed to the listener.

Not thread-safe. Serialize access externally (see scheduler.RotationScheduler).
"""

import math
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from operator import attrgetter
from typing import TYPE_CHECKING

import structlog

from .errors import (
    AggregatorClosedError,
    InvalidAggregatorConfig,
    InvalidSampleError,
    StatisticError,
)
from .listener import AggregationListener
from .models import AggregatedData
from .statistics import DEFAULT_STATISTICS, Statistic, statistics_from_names

if TYPE_CHECKING:
    from config import Settings

# Sentinel period_start; the first sample always rotates away from it.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_LATENESS = timedelta(seconds=60)

Timestamp = datetime | int | float


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_datetime(timestamp: Timestamp) -> datetime:
    """Aware datetimes pass through, naive ones are taken as UTC, numbers as epoch seconds."""
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            return timestamp.replace(tzinfo=timezone.utc)
        return timestamp
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    raise TypeError(f"unsupported timestamp type: {type(timestamp).__name__}")


def floor_hour(t: datetime) -> datetime:
    return t.replace(minute=0, second=0, microsecond=0)


def aligned_period_start(t: datetime, period: timedelta) -> datetime:
    """
    Start of the window containing `t`, counted in whole periods from the top
    of t's hour. The result p satisfies p <= t < p + period.
    """
    anchor = floor_hour(t)
    return anchor + ((t - anchor) // period) * period


class Aggregator:
    """
    Buffers samples for one metric and emits one batch of AggregatedData per
    closed window.

    Statistics flagged `ordered` are evaluated over a single ascending sort of
    the window; the others see the samples in arrival order. Within a batch,
    unordered records come first, each group sorted by statistic name.
    """

    def __init__(
        self,
        metric: str,
        period: timedelta,
        listener: AggregationListener | None = None,
        host: str = "",
        service: str = "",
        statistics: Iterable[Statistic] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        if not metric:
            raise InvalidAggregatorConfig("metric must be a non-empty string")
        if not isinstance(period, timedelta) or period <= timedelta(0):
            raise InvalidAggregatorConfig(f"period must be a positive timedelta, got {period!r}")

        stats = frozenset(DEFAULT_STATISTICS if statistics is None else statistics)
        if not stats:
            raise InvalidAggregatorConfig("at least one statistic is required")

        self._metric = metric
        self._period = period
        self._host = host
        self._service = service
        self._listener = listener
        self._clock = clock or utcnow

        by_name = attrgetter("name")
        self._unordered = tuple(sorted((s for s in stats if not s.ordered), key=by_name))
        self._ordered = tuple(sorted((s for s in stats if s.ordered), key=by_name))

        self._samples: list[float] = []
        self._period_start = EPOCH
        self._closed = False

        self.log = structlog.get_logger(
            component="aggregator", metric=metric, host=host, service=service
        )

    @classmethod
    def from_settings(
        cls,
        metric: str,
        settings: "Settings",
        listener: AggregationListener | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> "Aggregator":
        return cls(
            metric,
            settings.period,
            listener=listener,
            host=settings.host,
            service=settings.service,
            statistics=statistics_from_names(settings.statistics),
            clock=clock,
        )

    # ─── Public API ──────────────────────────────────────────────

    def add_sample(self, value: float, timestamp: Timestamp):
        """
        Add one sample. Rotates first if `timestamp` is past the open window.
        Late samples (before period_start) join the open window unchanged.
        NaN and infinite values are rejected before any state change.
        """
        if self._closed:
            raise AggregatorClosedError(f"aggregator for {self._metric!r} is closed")
        value = float(value)
        if not math.isfinite(value):
            raise InvalidSampleError(f"non-finite sample {value!r} for {self._metric!r}")
        self._rotate(to_datetime(timestamp))
        self._samples.append(value)
        self.log.debug("sample_added", value=value, pending=len(self._samples))

    def check_rotate(self, lateness: timedelta = DEFAULT_LATENESS):
        """Periodic tick: rotate if `now - lateness` is past the open window."""
        if self._closed:
            return
        self._rotate(to_datetime(self._clock()) - lateness)

    def close(self):
        """Emit whatever is buffered as a final window. period_start is left as is."""
        batch = self._build_batch()
        self._samples.clear()
        if not self._closed:
            self._closed = True
            self.log.info("aggregator_closed", period_start=self._period_start.isoformat())
        if batch:
            self._emit(batch)

    @property
    def listener(self) -> AggregationListener | None:
        return self._listener

    @listener.setter
    def listener(self, listener: AggregationListener | None):
        self._listener = listener

    @property
    def metric(self) -> str:
        return self._metric

    @property
    def host(self) -> str:
        return self._host

    @property
    def service(self) -> str:
        return self._service

    @property
    def period(self) -> timedelta:
        return self._period

    @property
    def period_start(self) -> datetime:
        return self._period_start

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    @property
    def unordered_statistics(self) -> frozenset[Statistic]:
        return frozenset(self._unordered)

    @property
    def ordered_statistics(self) -> frozenset[Statistic]:
        return frozenset(self._ordered)

    # ─── Rotation ──────────────────────────────────────────────

    def _rotate(self, t: datetime):
        period_end = self._period_start + self._period
        if t <= period_end:
            return

        new_start = aligned_period_start(t, self._period)
        # A failing statistic aborts here, leaving buffer and period_start intact.
        batch = self._build_batch()

        closed_start = self._period_start
        self._samples.clear()
        self._period_start = new_start
        self.log.debug(
            "aggregation_rotated",
            closed_start=closed_start.isoformat(),
            period_start=new_start.isoformat(),
            records=len(batch),
        )
        if batch:
            self._emit(batch)

    # ─── Emission ──────────────────────────────────────────────

    def _build_batch(self) -> list[AggregatedData]:
        if not self._samples:
            return []
        samples = list(self._samples)
        batch = [self._evaluate(stat, samples) for stat in self._unordered]
        if self._ordered:
            samples.sort()
            batch.extend(self._evaluate(stat, samples) for stat in self._ordered)
        return batch

    def _evaluate(self, stat: Statistic, samples: list[float]) -> AggregatedData:
        try:
            value = float(stat.calculate(samples))
        except Exception as exc:
            raise StatisticError(stat.name, f"calculation failed: {exc}") from exc
        if not math.isfinite(value):
            raise StatisticError(stat.name, f"non-finite result {value!r}")
        return AggregatedData(
            metric=self._metric,
            host=self._host,
            service=self._service,
            period=self._period,
            period_start=self._period_start,
            statistic=stat,
            value=value,
        )

    def _emit(self, batch: list[AggregatedData]):
        listener = self._listener
        if listener is None:
            self.log.debug("listener_missing", discarded=len(batch))
            return
        self.log.debug(
            "aggregations_emitted",
            records=len(batch),
            period_start=batch[0].period_start.isoformat(),
        )
        listener.record_aggregation(batch)
