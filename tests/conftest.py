"""Shared test fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from aggregation import Aggregator, CollectingListener
from config import Settings


class FakeClock:
    """Manually advanced wall clock for check_rotate()."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings():
    """Test settings with fixed labels."""
    return Settings(
        host="test-host",
        service="test-service",
        period_seconds=60,
        lateness_seconds=60,
    )


@pytest.fixture
def t0() -> datetime:
    return datetime(2024, 3, 1, 12, 0, 5, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0) -> FakeClock:
    return FakeClock(t0)


@pytest.fixture
def collector() -> CollectingListener:
    return CollectingListener()


@pytest.fixture
def make_aggregator(collector, clock):
    def _make(period=timedelta(seconds=60), **kwargs) -> Aggregator:
        kwargs.setdefault("listener", collector)
        kwargs.setdefault("host", "web-01")
        kwargs.setdefault("service", "checkout")
        kwargs.setdefault("clock", clock)
        return Aggregator("latency_ms", period, **kwargs)

    return _make
