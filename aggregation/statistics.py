"""
Statistics evaluated over one closed aggregation window.

Each statistic declares whether it needs its input sorted ascending
(`ordered`). The aggregator sorts the window at most once and hands the
sorted copy only to ordered statistics.
"""

import math
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from .errors import UnknownStatisticError


class Statistic(ABC):
    """A named, pure reduction from a non-empty sample sequence to a float."""

    __slots__ = ("name", "ordered")

    def __init__(self, name: str, ordered: bool):
        self.name = name
        self.ordered = ordered

    @abstractmethod
    def calculate(self, samples: Sequence[float]) -> float:
        """Reduce `samples` to one value. Must not mutate `samples`."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Statistic):
            return NotImplemented
        return type(self) is type(other) and self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class CountStatistic(Statistic):
    def __init__(self):
        super().__init__("n", ordered=False)

    def calculate(self, samples: Sequence[float]) -> float:
        return float(len(samples))


class MeanStatistic(Statistic):
    def __init__(self):
        super().__init__("mean", ordered=False)

    def calculate(self, samples: Sequence[float]) -> float:
        return math.fsum(samples) / len(samples)


class SumStatistic(Statistic):
    def __init__(self):
        super().__init__("sum", ordered=False)

    def calculate(self, samples: Sequence[float]) -> float:
        return math.fsum(samples)


class PercentileStatistic(Statistic):
    """
    Nearest-rank percentile over ascending input.

    For N samples the value at index max(0, ceil(p * N / 100) - 1) is
    returned, so p=0 is the first element and p=100 the last.
    """

    __slots__ = ("percentile",)

    def __init__(self, percentile: float, name: str | None = None):
        if not 0.0 <= percentile <= 100.0:
            raise ValueError(f"percentile must be within [0, 100], got {percentile}")
        super().__init__(name or _percentile_name(percentile), ordered=True)
        self.percentile = float(percentile)

    def calculate(self, samples: Sequence[float]) -> float:
        # rounding keeps float noise (e.g. 99.9 * N) from bumping an exact rank
        rank = math.ceil(round(self.percentile * len(samples) / 100.0, 9))
        return samples[max(0, rank - 1)]


class MinStatistic(PercentileStatistic):
    def __init__(self):
        super().__init__(0.0, name="min")


class MaxStatistic(PercentileStatistic):
    def __init__(self):
        super().__init__(100.0, name="max")


def _percentile_name(percentile: float) -> str:
    # 99.9 -> "tp99.9", 50.0 -> "tp50"
    return "tp" + f"{percentile:g}"


TP0 = PercentileStatistic(0)
TP50 = PercentileStatistic(50)
TP99 = PercentileStatistic(99)
TP99P9 = PercentileStatistic(99.9)
TP100 = PercentileStatistic(100)

DEFAULT_STATISTICS: frozenset[Statistic] = frozenset(
    {CountStatistic(), MeanStatistic(), TP0, TP50, TP99, TP99P9, TP100}
)

_FIXED = {
    "n": CountStatistic,
    "count": CountStatistic,
    "mean": MeanStatistic,
    "sum": SumStatistic,
    "min": MinStatistic,
    "max": MaxStatistic,
}
_PERCENTILE_RE = re.compile(r"^tp(\d{1,3}(?:\.\d+)?)$")


def statistic_by_name(name: str) -> Statistic:
    """Resolve a configured name such as "mean" or "tp99.9" to a statistic."""
    key = name.strip().lower()
    factory = _FIXED.get(key)
    if factory is not None:
        return factory()
    match = _PERCENTILE_RE.match(key)
    if match:
        percentile = float(match.group(1))
        if percentile <= 100.0:
            return PercentileStatistic(percentile)
    raise UnknownStatisticError(name)


def statistics_from_names(names: Iterable[str]) -> frozenset[Statistic]:
    return frozenset(statistic_by_name(name) for name in names)
