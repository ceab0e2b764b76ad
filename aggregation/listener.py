"""Sinks that receive the batch produced by each window rotation."""

from abc import ABC, abstractmethod

import structlog

from .models import AggregatedData


class AggregationListener(ABC):
    """
    Receives every record of one rotation in a single call.

    Called synchronously from the aggregator; exceptions raised here
    propagate to whoever triggered the rotation.
    """

    @abstractmethod
    def record_aggregation(self, batch: list[AggregatedData]) -> None:
        """Handle one non-empty batch sharing metric, host, service and period_start."""


class CollectingListener(AggregationListener):
    """Keeps every delivered batch in memory, in delivery order."""

    def __init__(self):
        self.batches: list[list[AggregatedData]] = []

    def record_aggregation(self, batch: list[AggregatedData]) -> None:
        self.batches.append(list(batch))

    @property
    def records(self) -> list[AggregatedData]:
        return [record for batch in self.batches for record in batch]

    def values(self, index: int = -1) -> dict[str, float]:
        """Statistic name -> value for one batch (the latest by default)."""
        return {r.statistic.name: r.value for r in self.batches[index]}

    def clear(self):
        self.batches.clear()


class LoggingListener(AggregationListener):
    """Writes one structured log event per record."""

    def __init__(self, logger: structlog.BoundLogger | None = None, event: str = "aggregation"):
        self.log = logger or structlog.get_logger(component="aggregation-listener")
        self._event = event

    def record_aggregation(self, batch: list[AggregatedData]) -> None:
        for record in batch:
            self.log.info(self._event, **record.to_dict())


class FanOutListener(AggregationListener):
    """Delivers each batch to several listeners in order; the first failure propagates."""

    def __init__(self, *listeners: AggregationListener):
        self._listeners = list(listeners)

    def add(self, listener: AggregationListener):
        self._listeners.append(listener)

    def record_aggregation(self, batch: list[AggregatedData]) -> None:
        for listener in self._listeners:
            listener.record_aggregation(batch)

    @property
    def listeners(self) -> list[AggregationListener]:
        return list(self._listeners)
