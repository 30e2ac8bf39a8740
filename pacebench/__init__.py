"""
PaceBench - paced load test execution with percentile reporting.
"""

from pacebench.core import (
    LoadTestRunner,
    MetricsCollector,
    PerformanceThresholds,
    UserPool,
    assert_thresholds,
)
from pacebench.models import (
    LoadTestConfig,
    PerformanceReport,
    TransactionMetric,
    TransactionStatus,
)

__version__ = "0.1.0"

__all__ = [
    "LoadTestRunner",
    "MetricsCollector",
    "PerformanceThresholds",
    "UserPool",
    "assert_thresholds",
    "LoadTestConfig",
    "PerformanceReport",
    "TransactionMetric",
    "TransactionStatus",
]
