"""
Shared pytest configuration and fixtures for PaceBench tests.

This module provides:
- Report/metric factories for statistics and threshold tests
- Helpers for building simple async actions
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Callable

import pytest

from pacebench.models import (
    DurationStats,
    PerformanceReport,
    TransactionMetric,
    TransactionStatus,
)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_metric() -> Callable[..., TransactionMetric]:
    """
    Factory fixture for TransactionMetric.

    Usage:
        metric = make_metric(25.0, status=TransactionStatus.FAIL, error="boom")
    """

    def _make(
        duration_ms: float,
        status: TransactionStatus = TransactionStatus.PASS,
        error: str | None = None,
        step_name: str = "Iter-1",
    ) -> TransactionMetric:
        return TransactionMetric(
            duration_ms=duration_ms,
            status=status,
            error=error,
            step_name=step_name,
        )

    return _make


@pytest.fixture
def make_report() -> Callable[..., PerformanceReport]:
    """Factory fixture for PerformanceReport with explicit statistics."""

    def _make(
        *,
        total: int = 10,
        failed: int = 0,
        throughput: float = 5.0,
        avg: float = 50.0,
        p90: float = 80.0,
        p95: float = 90.0,
        p99: float = 99.0,
        test_name: str = "Report Under Test",
    ) -> PerformanceReport:
        start = datetime(2024, 1, 1, tzinfo=UTC)
        return PerformanceReport(
            test_name=test_name,
            start_time=start,
            end_time=start + timedelta(seconds=2),
            total_transactions=total,
            passed_transactions=total - failed,
            failed_transactions=failed,
            error_rate=(failed / total) * 100 if total else 0.0,
            duration=DurationStats(
                min=1.0, max=100.0, avg=avg, p50=50.0, p90=p90, p95=p95, p99=p99
            ),
            throughput=throughput,
        )

    return _make


@pytest.fixture
def sleeping_action() -> Callable[[float], Callable]:
    """Build an action that sleeps for the given number of milliseconds."""

    def _make(ms: float):
        async def _action() -> None:
            await asyncio.sleep(ms / 1000.0)

        return _action

    return _make


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks timing-based tests that sleep for real (deselect with '-m \"not slow\"')",
    )
