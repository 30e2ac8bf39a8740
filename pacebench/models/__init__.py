"""
Data models for PaceBench.

This package contains Pydantic models for:
- Load test configuration
- Per-transaction metrics
- Performance reports
"""

from pacebench.models.load_test import (
    TransactionStatus,
    LoadTestConfig,
    TransactionMetric,
    DurationStats,
    PerformanceReport,
)

__all__ = [
    "TransactionStatus",
    "LoadTestConfig",
    "TransactionMetric",
    "DurationStats",
    "PerformanceReport",
]
