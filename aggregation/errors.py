"""Exception hierarchy for the aggregation core."""


class AggregationError(Exception):
    """Base class for every error raised by the aggregation package."""


class InvalidAggregatorConfig(AggregationError, ValueError):
    """Raised at construction for an empty metric or a non-positive period."""


class AggregatorClosedError(AggregationError, RuntimeError):
    """Raised when a sample is offered to an aggregator after close()."""


class StatisticError(AggregationError):
    """A statistic raised or produced a non-finite value during emission."""

    def __init__(self, statistic_name: str, message: str):
        super().__init__(f"{statistic_name}: {message}")
        self.statistic_name = statistic_name


class UnknownStatisticError(AggregationError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown statistic {self.name!r}"


class InvalidSampleError(AggregationError, ValueError):
    """Raised for a NaN or infinite sample value; the aggregator state is unchanged."""
