"""Records emitted by an aggregator when a window closes."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .statistics import Statistic


@dataclass(frozen=True)
class AggregatedData:
    """One statistic's value over one closed window of one metric."""

    metric: str
    host: str
    service: str
    period: timedelta
    period_start: datetime
    statistic: Statistic
    value: float

    @property
    def statistic_name(self) -> str:
        return self.statistic.name

    def to_dict(self) -> dict[str, Any]:
        """Flatten to JSON-friendly primitives for downstream sinks."""
        return {
            "metric": self.metric,
            "host": self.host,
            "service": self.service,
            "period": self.period.total_seconds(),
            "period_start": self.period_start.isoformat(),
            "statistic": self.statistic.name,
            "value": self.value,
        }
