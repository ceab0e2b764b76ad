"""Tests for the bundled aggregation listeners and the emitted record."""

from datetime import datetime, timedelta, timezone

import pytest
import structlog
from structlog.testing import capture_logs

from aggregation.listener import (
    AggregationListener,
    CollectingListener,
    FanOutListener,
    LoggingListener,
)
from aggregation.models import AggregatedData
from aggregation.statistics import MeanStatistic, PercentileStatistic


def record(stat=None, value=1.0) -> AggregatedData:
    return AggregatedData(
        metric="latency_ms",
        host="web-01",
        service="checkout",
        period=timedelta(minutes=5),
        period_start=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
        statistic=stat or MeanStatistic(),
        value=value,
    )


class TestAggregatedData:
    def test_frozen(self):
        r = record()
        with pytest.raises(AttributeError):
            r.value = 2.0

    def test_to_dict(self):
        assert record(PercentileStatistic(99.9), 12.5).to_dict() == {
            "metric": "latency_ms",
            "host": "web-01",
            "service": "checkout",
            "period": 300.0,
            "period_start": "2024-03-01T12:00:00+00:00",
            "statistic": "tp99.9",
            "value": 12.5,
        }

    def test_statistic_name(self):
        assert record().statistic_name == "mean"


class TestCollectingListener:
    def test_collects_batches_in_order(self):
        listener = CollectingListener()
        listener.record_aggregation([record(value=1.0)])
        listener.record_aggregation([record(value=2.0), record(PercentileStatistic(50), 3.0)])
        assert len(listener.batches) == 2
        assert [r.value for r in listener.records] == [1.0, 2.0, 3.0]
        assert listener.values() == {"mean": 2.0, "tp50": 3.0}
        assert listener.values(0) == {"mean": 1.0}

    def test_copies_batch(self):
        listener = CollectingListener()
        batch = [record()]
        listener.record_aggregation(batch)
        batch.clear()
        assert len(listener.batches[0]) == 1

    def test_clear(self):
        listener = CollectingListener()
        listener.record_aggregation([record()])
        listener.clear()
        assert listener.batches == []


class TestFanOutListener:
    def test_delivers_to_all(self):
        a, b = CollectingListener(), CollectingListener()
        fan = FanOutListener(a)
        fan.add(b)
        fan.record_aggregation([record()])
        assert len(a.batches) == 1
        assert len(b.batches) == 1
        assert fan.listeners == [a, b]

    def test_first_failure_propagates(self):
        class Broken(AggregationListener):
            def record_aggregation(self, batch):
                raise RuntimeError("down")

        first, last = CollectingListener(), CollectingListener()
        fan = FanOutListener(first, Broken(), last)
        with pytest.raises(RuntimeError):
            fan.record_aggregation([record()])
        assert len(first.batches) == 1
        assert last.batches == []


class TestLoggingListener:
    def test_logs_one_event_per_record(self):
        with capture_logs() as logs:
            listener = LoggingListener(structlog.get_logger())
            listener.record_aggregation([record(value=4.0), record(PercentileStatistic(50), 5.0)])

        assert [e["event"] for e in logs] == ["aggregation", "aggregation"]
        assert logs[0]["statistic"] == "mean"
        assert logs[1]["value"] == 5.0
        assert all(e["log_level"] == "info" for e in logs)
        assert logs[0]["metric"] == "latency_ms"

    def test_custom_event_name(self):
        with capture_logs() as logs:
            LoggingListener(structlog.get_logger(), event="rollup").record_aggregation([record()])
        assert logs[0]["event"] == "rollup"
