"""
Threshold gating for performance reports.

Compares a PerformanceReport against optional limits so that a test suite
or CI job can fail a build on error rate, latency or throughput.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pacebench.exceptions import ThresholdExceededError
from pacebench.models import PerformanceReport

logger = logging.getLogger(__name__)


class PerformanceThresholds(BaseModel):
    """Limits a report must satisfy. Unset limits are not checked."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_error_rate: Optional[float] = Field(
        None, ge=0, le=100, description="Maximum error rate (%)"
    )
    max_avg_ms: Optional[float] = Field(None, ge=0, description="Maximum mean duration")
    max_p90_ms: Optional[float] = Field(None, ge=0, description="Maximum p90 duration")
    max_p95_ms: Optional[float] = Field(None, ge=0, description="Maximum p95 duration")
    max_p99_ms: Optional[float] = Field(None, ge=0, description="Maximum p99 duration")
    min_throughput: Optional[float] = Field(
        None, ge=0, description="Minimum throughput (ops/sec)"
    )

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in self.model_dump().values())


@dataclass(frozen=True, slots=True)
class ThresholdViolation:
    metric: str
    actual: float
    limit: float
    comparison: str  # "<=" or ">="

    def describe(self) -> str:
        return f"{self.metric}={self.actual:.2f} (expected {self.comparison} {self.limit:.2f})"


def _checks(report: PerformanceReport, thresholds: PerformanceThresholds):
    d = report.duration
    return [
        ("error_rate", report.error_rate, thresholds.max_error_rate, "<="),
        ("avg_ms", d.avg, thresholds.max_avg_ms, "<="),
        ("p90_ms", d.p90, thresholds.max_p90_ms, "<="),
        ("p95_ms", d.p95, thresholds.max_p95_ms, "<="),
        ("p99_ms", d.p99, thresholds.max_p99_ms, "<="),
        ("throughput", report.throughput, thresholds.min_throughput, ">="),
    ]


def evaluate_thresholds(
    report: PerformanceReport, thresholds: PerformanceThresholds
) -> List[ThresholdViolation]:
    """
    Return every threshold the report breaches.

    Comparisons are inclusive: a value equal to its limit passes.
    """
    violations: List[ThresholdViolation] = []
    for metric, actual, limit, comparison in _checks(report, thresholds):
        if limit is None:
            continue
        ok = actual <= limit if comparison == "<=" else actual >= limit
        if not ok:
            violations.append(
                ThresholdViolation(
                    metric=metric, actual=actual, limit=limit, comparison=comparison
                )
            )
    return violations


def assert_thresholds(report: PerformanceReport, thresholds: PerformanceThresholds) -> None:
    """Raise ThresholdExceededError if the report breaches any threshold."""
    violations = evaluate_thresholds(report, thresholds)
    if violations:
        logger.error(
            "Load test '%s' breached %d threshold(s)", report.test_name, len(violations)
        )
        raise ThresholdExceededError(report.test_name, violations)


def format_threshold_summary(
    report: PerformanceReport, thresholds: PerformanceThresholds
) -> str:
    """Human-readable results table for CI logs."""
    lines = [
        f"Threshold Check: {report.test_name}",
        "-" * 60,
        f"{'Metric':<22}{'Actual':>12}{'Limit':>14}{'Status':>12}",
        "-" * 60,
    ]
    failed = {v.metric for v in evaluate_thresholds(report, thresholds)}
    for metric, actual, limit, comparison in _checks(report, thresholds):
        if limit is None:
            continue
        status = "FAIL" if metric in failed else "PASS"
        lines.append(
            f"{metric:<22}{actual:>12.2f}{comparison + ' ' + format(limit, '.2f'):>14}{status:>12}"
        )
    lines.append("-" * 60)
    lines.append(f"Overall: {'FAIL' if failed else 'PASS'}")
    return "\n".join(lines)
