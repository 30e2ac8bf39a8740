"""Load test execution, metrics aggregation and gating."""

from pacebench.core.metrics_collector import (
    MetricsCollector,
    format_report,
    nearest_rank_percentile,
)
from pacebench.core.load_test_runner import (
    Action,
    LoadTestRunner,
    RunnerState,
    TransactionOutcome,
)
from pacebench.core.thresholds import (
    PerformanceThresholds,
    ThresholdViolation,
    assert_thresholds,
    evaluate_thresholds,
)
from pacebench.core.user_pool import UserPool

__all__ = [
    "MetricsCollector",
    "format_report",
    "nearest_rank_percentile",
    "Action",
    "LoadTestRunner",
    "RunnerState",
    "TransactionOutcome",
    "PerformanceThresholds",
    "ThresholdViolation",
    "assert_thresholds",
    "evaluate_thresholds",
    "UserPool",
]
