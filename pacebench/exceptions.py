"""
Exception types raised by PaceBench.

Transaction failures are never wrapped: the action's own exception is
re-raised unchanged by ``LoadTestRunner.run_transaction``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from pacebench.core.thresholds import ThresholdViolation


class PaceBenchError(Exception):
    """Base class for errors raised by this package."""


class ThresholdExceededError(PaceBenchError):
    """A performance report breached one or more thresholds."""

    def __init__(self, test_name: str, violations: Iterable["ThresholdViolation"]):
        self.test_name = test_name
        self.violations = list(violations)
        details = "; ".join(v.describe() for v in self.violations)
        super().__init__(f"{test_name}: {len(self.violations)} threshold(s) exceeded: {details}")


class UnexpectedStatusError(PaceBenchError):
    """An HTTP action received a status code it was not told to expect."""

    def __init__(self, method: str, url: str, status_code: int, expected: Iterable[int]):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.expected = sorted(expected)
        super().__init__(
            f"{method} {url} returned {status_code}, expected {', '.join(map(str, self.expected))}"
        )


class ScenarioError(PaceBenchError):
    """A scenario file is missing or malformed."""
