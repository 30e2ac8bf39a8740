"""
Metrics Collector

Accumulates transaction measurements and reduces them into a performance
report with nearest-rank percentiles.
"""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from datetime import UTC, datetime
from typing import List, Sequence, Tuple

from pacebench.config import settings
from pacebench.models import (
    DurationStats,
    PerformanceReport,
    TransactionMetric,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

REPORT_SEPARATOR = "=" * 60


def nearest_rank_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """
    Nearest-rank percentile of an ascending sequence.

    Indexes ``ceil(p / 100 * n) - 1``; no interpolation between neighbours.
    Returns 0.0 for an empty sequence.
    """
    if not sorted_values:
        return 0.0
    index = math.ceil((percentile / 100) * len(sorted_values)) - 1
    return sorted_values[max(index, 0)]


def _fixed(value: float, places: int) -> str:
    """Fixed-point text with halves rounded away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_report(report: PerformanceReport) -> str:
    """Render the operator-facing text block for a report (p50 is not printed)."""
    d = report.duration
    lines = [
        REPORT_SEPARATOR,
        f"PERFORMANCE REPORT: {report.test_name}",
        REPORT_SEPARATOR,
        f"Total Transactions: {report.total_transactions}",
        f"Passed:             {report.passed_transactions}",
        f"Failed:             {report.failed_transactions}",
        f"Error Rate:         {_fixed(report.error_rate, 2)}%",
        f"Throughput:         {_fixed(report.throughput, 2)} ops/sec",
        "Duration (ms):",
        f"  Min: {_fixed(d.min, 0)}",
        f"  Max: {_fixed(d.max, 0)}",
        f"  Avg: {_fixed(d.avg, 0)}",
        f"  p90: {_fixed(d.p90, 0)}",
        f"  p95: {_fixed(d.p95, 0)}",
        f"  p99: {_fixed(d.p99, 0)}",
        REPORT_SEPARATOR,
    ]
    return "\n".join(lines)


class MetricsCollector:
    """
    Collects transaction metrics for a single load test run.

    Metrics are append-only. ``generate_report`` always works over the whole
    sequence, so it can be called repeatedly as the run progresses. The
    collector has one writer and does no locking.
    """

    def __init__(self):
        self.start_time: datetime = datetime.now(UTC)
        self._metrics: List[TransactionMetric] = []

    @property
    def metrics(self) -> Tuple[TransactionMetric, ...]:
        """Recorded metrics in recording order."""
        return tuple(self._metrics)

    def __len__(self) -> int:
        return len(self._metrics)

    def record(self, metric: TransactionMetric) -> None:
        """Append one transaction metric."""
        self._metrics.append(metric)

    def _calculate_duration_stats(self, durations: List[float]) -> DurationStats:
        if not durations:
            return DurationStats()

        sorted_durations = sorted(durations)
        n = len(sorted_durations)

        return DurationStats(
            min=sorted_durations[0],
            max=sorted_durations[-1],
            avg=sum(sorted_durations) / n,
            p50=nearest_rank_percentile(sorted_durations, 50),
            p90=nearest_rank_percentile(sorted_durations, 90),
            p95=nearest_rank_percentile(sorted_durations, 95),
            p99=nearest_rank_percentile(sorted_durations, 99),
        )

    def generate_report(self, test_name: str) -> PerformanceReport:
        """
        Build a performance report over every metric recorded so far.

        The text summary is written to the log and, when
        ``settings.PRINT_REPORT`` is set, to stdout.

        Args:
            test_name: Label for the report

        Returns:
            PerformanceReport snapshot
        """
        end_time = datetime.now(UTC)
        total = len(self._metrics)
        passed = sum(1 for m in self._metrics if m.status == TransactionStatus.PASS)
        failed = total - passed
        elapsed_seconds = (end_time - self.start_time).total_seconds()

        report = PerformanceReport(
            test_name=test_name,
            start_time=self.start_time,
            end_time=end_time,
            total_transactions=total,
            passed_transactions=passed,
            failed_transactions=failed,
            error_rate=(failed / total) * 100 if total > 0 else 0.0,
            duration=self._calculate_duration_stats(
                [m.duration_ms for m in self._metrics]
            ),
            # A zero-length window divides by one instead
            throughput=total / (elapsed_seconds or 1),
        )

        self._emit(report)
        return report

    def _emit(self, report: PerformanceReport) -> None:
        text = format_report(report)
        if settings.PRINT_REPORT:
            print(f"\n{text}")
        logger.info("\n%s", text)
