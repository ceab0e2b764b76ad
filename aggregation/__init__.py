from .aggregator import Aggregator, EPOCH, DEFAULT_LATENESS, aligned_period_start
from .errors import (
    AggregationError,
    AggregatorClosedError,
    InvalidAggregatorConfig,
    InvalidSampleError,
    StatisticError,
    UnknownStatisticError,
)
from .listener import AggregationListener, CollectingListener, FanOutListener, LoggingListener
from .models import AggregatedData
from .scheduler import RotationScheduler
from .statistics import (
    DEFAULT_STATISTICS,
    CountStatistic,
    MaxStatistic,
    MeanStatistic,
    MinStatistic,
    PercentileStatistic,
    Statistic,
    SumStatistic,
    statistic_by_name,
    statistics_from_names,
)

__all__ = [
    "Aggregator",
    "EPOCH",
    "DEFAULT_LATENESS",
    "aligned_period_start",
    "AggregationError",
    "AggregatorClosedError",
    "InvalidAggregatorConfig",
    "InvalidSampleError",
    "StatisticError",
    "UnknownStatisticError",
    "AggregationListener",
    "CollectingListener",
    "FanOutListener",
    "LoggingListener",
    "AggregatedData",
    "RotationScheduler",
    "DEFAULT_STATISTICS",
    "CountStatistic",
    "MaxStatistic",
    "MeanStatistic",
    "MinStatistic",
    "PercentileStatistic",
    "Statistic",
    "SumStatistic",
    "statistic_by_name",
    "statistics_from_names",
]
