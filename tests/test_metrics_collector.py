"""
Tests for MetricsCollector.

Validates nearest-rank percentiles, report aggregation, repeated report
generation and the printed summary format.
"""

import logging
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from pacebench.core.metrics_collector import (
    MetricsCollector,
    format_report,
    nearest_rank_percentile,
)
from pacebench.models import TransactionStatus


@pytest.fixture(autouse=True)
def _no_stdout_report():
    with patch("pacebench.core.metrics_collector.settings.PRINT_REPORT", False):
        yield


def test_nearest_rank_percentile_five_values() -> None:
    values = [10, 20, 30, 40, 50]

    assert nearest_rank_percentile(values, 50) == 30
    assert nearest_rank_percentile(values, 90) == 50
    assert nearest_rank_percentile(values, 100) == 50
    assert nearest_rank_percentile(values, 20) == 10


def test_nearest_rank_percentile_does_not_interpolate() -> None:
    values = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]

    # An interpolating method would give 5.5 here
    assert nearest_rank_percentile(values, 50) == 5
    assert nearest_rank_percentile(values, 95) == 10


def test_nearest_rank_percentile_empty() -> None:
    assert nearest_rank_percentile([], 95) == 0.0


def test_empty_report_is_all_zero() -> None:
    collector = MetricsCollector()
    report = collector.generate_report("Empty")

    assert report.total_transactions == 0
    assert report.passed_transactions == 0
    assert report.failed_transactions == 0
    assert report.error_rate == 0
    assert report.duration.min == 0
    assert report.duration.max == 0
    assert report.duration.avg == 0
    assert report.duration.p99 == 0
    assert report.throughput == 0


def test_report_statistics(make_metric) -> None:
    collector = MetricsCollector()
    for i, duration in enumerate([50, 10, 40, 20, 30], start=1):
        collector.record(make_metric(float(duration), step_name=f"Iter-{i}"))

    report = collector.generate_report("Stats")
    d = report.duration

    assert report.test_name == "Stats"
    assert d.min == 10
    assert d.max == 50
    assert d.avg == 30
    assert d.p50 == 30
    assert d.p90 == 50
    assert d.p50 <= d.p90 <= d.p95 <= d.p99 <= d.max
    assert d.min <= d.avg <= d.max


def test_error_rate_and_counts(make_metric) -> None:
    collector = MetricsCollector()
    for _ in range(3):
        collector.record(make_metric(10.0))
    collector.record(make_metric(10.0, status=TransactionStatus.FAIL, error="boom"))

    report = collector.generate_report("Errors")

    assert report.total_transactions == 4
    assert report.passed_transactions == 3
    assert report.failed_transactions == 1
    assert report.passed_transactions + report.failed_transactions == report.total_transactions
    assert report.error_rate == pytest.approx(25.0)


def test_duplicate_step_names_are_kept(make_metric) -> None:
    collector = MetricsCollector()
    collector.record(make_metric(5.0, step_name="Login"))
    collector.record(make_metric(7.0, step_name="Login"))

    assert len(collector) == 2
    assert [m.step_name for m in collector.metrics] == ["Login", "Login"]


def test_report_reflects_later_metrics(make_metric) -> None:
    collector = MetricsCollector()
    collector.record(make_metric(10.0))
    first = collector.generate_report("Cumulative")

    collector.record(make_metric(20.0))
    collector.record(make_metric(30.0))
    second = collector.generate_report("Cumulative")

    assert first.total_transactions == 1
    assert second.total_transactions == 3
    assert second.start_time == first.start_time
    assert second.end_time >= first.end_time


def test_throughput_uses_collector_lifetime(make_metric) -> None:
    start = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)
    end = datetime(2024, 1, 1, 12, 0, 4, tzinfo=UTC)

    with patch("pacebench.core.metrics_collector.datetime") as mock_dt:
        mock_dt.now.side_effect = [start, end]
        collector = MetricsCollector()
        for _ in range(10):
            collector.record(make_metric(1.0))
        report = collector.generate_report("Throughput")

    assert report.start_time == start
    assert report.end_time == end
    assert report.throughput == pytest.approx(2.5)


def test_throughput_zero_window_divides_by_one(make_metric) -> None:
    instant = datetime(2024, 1, 1, tzinfo=UTC)

    with patch("pacebench.core.metrics_collector.datetime") as mock_dt:
        mock_dt.now.return_value = instant
        collector = MetricsCollector()
        for _ in range(3):
            collector.record(make_metric(1.0))
        report = collector.generate_report("Instant")

    assert report.throughput == 3


def test_format_report_golden(make_report) -> None:
    report = make_report(
        total=4, failed=1, throughput=2.5, avg=30.4, p90=48.6, p95=49.0, p99=50.0,
        test_name="Golden",
    )

    expected = "\n".join(
        [
            "=" * 60,
            "PERFORMANCE REPORT: Golden",
            "=" * 60,
            "Total Transactions: 4",
            "Passed:             3",
            "Failed:             1",
            "Error Rate:         25.00%",
            "Throughput:         2.50 ops/sec",
            "Duration (ms):",
            "  Min: 1",
            "  Max: 100",
            "  Avg: 30",
            "  p90: 49",
            "  p95: 49",
            "  p99: 50",
            "=" * 60,
        ]
    )
    assert format_report(report) == expected
    assert "p50" not in format_report(report)


def test_format_report_rounds_halves_up(make_metric) -> None:
    collector = MetricsCollector()
    collector.record(make_metric(10.0))
    collector.record(make_metric(11.0))

    text = format_report(collector.generate_report("Halves"))

    assert "  Avg: 11" in text.splitlines()


def test_format_report_rounds_two_places_half_up(make_report) -> None:
    report = make_report(total=8, failed=1, throughput=0.125)

    text = format_report(report)

    assert "Error Rate:         12.50%" in text
    assert "Throughput:         0.13 ops/sec" in text


def test_report_is_logged(make_metric, caplog) -> None:
    collector = MetricsCollector()
    collector.record(make_metric(12.0))

    with caplog.at_level(logging.INFO, logger="pacebench.core.metrics_collector"):
        collector.generate_report("Logged")

    assert "PERFORMANCE REPORT: Logged" in caplog.text


def test_report_printed_when_enabled(make_metric, capsys) -> None:
    collector = MetricsCollector()
    collector.record(make_metric(12.0))

    with patch("pacebench.core.metrics_collector.settings.PRINT_REPORT", True):
        collector.generate_report("Printed")

    out = capsys.readouterr().out
    assert "PERFORMANCE REPORT: Printed" in out
    assert "Total Transactions: 1" in out
