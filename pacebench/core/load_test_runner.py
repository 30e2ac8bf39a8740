"""
Load Test Runner

Drives a caller-supplied async action in a paced loop, bounded either by an
iteration count or by wall-clock duration, and records one metric per
invocation.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from pacebench.core.metrics_collector import MetricsCollector
from pacebench.models import (
    LoadTestConfig,
    PerformanceReport,
    TransactionMetric,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[Any]]


class RunnerState(str, Enum):
    """Lifecycle of a runner."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class TransactionOutcome:
    """Recorded metric plus the exception the action raised, if any."""

    metric: TransactionMetric
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class LoadTestRunner:
    """
    Runs load tests with pacing, think time and duration control.

    Iterations never overlap: the next action starts only after the current
    transaction's metric has been recorded. ``stop()`` is cooperative and is
    observed at the top of the next iteration.
    """

    def __init__(
        self,
        config: Union[LoadTestConfig, Mapping[str, Any]],
        *,
        stop_event: Optional[asyncio.Event] = None,
    ):
        """
        Initialize the runner.

        Args:
            config: Run configuration; a mapping is validated into LoadTestConfig
            stop_event: Shared stop signal, e.g. from a UserPool
        """
        if not isinstance(config, LoadTestConfig):
            config = LoadTestConfig.model_validate(dict(config))
        self.config = config
        self.collector = MetricsCollector()
        self._stop_event = stop_event if stop_event is not None else asyncio.Event()
        self.state = RunnerState.IDLE
        self.iteration_count = 0

    @property
    def metrics(self) -> tuple[TransactionMetric, ...]:
        return self.collector.metrics

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Ask the loop to stop before its next iteration."""
        self._stop_event.set()

    async def _execute(self, step_name: str, action: Action) -> TransactionOutcome:
        """
        Time one transaction and record its metric.

        Exceptions from the action are returned in the outcome rather than
        raised. Cancellation is recorded as a failure and then propagates.
        """
        timestamp = datetime.now(UTC)
        start = time.perf_counter()
        status = TransactionStatus.PASS
        error_msg: Optional[str] = None
        caught: Optional[BaseException] = None

        try:
            if self.config.think_time_ms > 0:
                await asyncio.sleep(self.config.think_time_ms / 1000.0)
            await action()
        except asyncio.CancelledError:
            status = TransactionStatus.FAIL
            error_msg = "cancelled"
            raise
        except Exception as e:
            status = TransactionStatus.FAIL
            error_msg = _error_message(e)
            caught = e
        finally:
            metric = TransactionMetric(
                timestamp=timestamp,
                duration_ms=(time.perf_counter() - start) * 1000.0,
                status=status,
                error=error_msg,
                step_name=step_name,
            )
            self.collector.record(metric)

        return TransactionOutcome(metric=metric, error=caught)

    async def run_transaction(self, step_name: str, action: Action) -> None:
        """
        Execute a single transaction and record its metric.

        The metric is recorded on every exit path. A failing action's
        exception is re-raised so the caller decides whether it is fatal.

        Args:
            step_name: Label stored on the metric
            action: Zero-argument coroutine function to measure
        """
        outcome = await self._execute(step_name, action)
        if outcome.error is not None:
            logger.warning(
                "Transaction %s failed after %.0f ms: %s",
                step_name,
                outcome.metric.duration_ms,
                outcome.metric.error,
            )
            raise outcome.error

    def _should_continue(self, loop_start: float) -> bool:
        if self._stop_event.is_set():
            return False
        if self.config.duration_ms > 0:
            return (time.perf_counter() - loop_start) * 1000.0 < self.config.duration_ms
        return self.iteration_count < self.config.iterations

    async def run(self, action: Action) -> PerformanceReport:
        """
        Run the load test loop and return the performance report.

        A failing iteration is logged and counted but does not abort the run.

        Args:
            action: Zero-argument coroutine function executed once per iteration

        Returns:
            PerformanceReport for every transaction this runner recorded
        """
        cfg = self.config
        logger.info(
            "Load test '%s' starting: %s, pacing=%.0fms, think_time=%.0fms",
            cfg.test_name,
            f"duration={cfg.duration_ms:.0f}ms" if cfg.is_timed else f"iterations={cfg.iterations}",
            cfg.pacing_ms,
            cfg.think_time_ms,
        )

        self.state = RunnerState.RUNNING
        self.iteration_count = 0
        loop_start = time.perf_counter()

        try:
            while self._should_continue(loop_start):
                self.iteration_count += 1
                step_name = f"Iter-{self.iteration_count}"
                iter_start = time.perf_counter()

                outcome = await self._execute(step_name, action)
                if outcome.failed:
                    logger.warning(
                        "%s failed after %.0f ms: %s",
                        step_name,
                        outcome.metric.duration_ms,
                        outcome.metric.error,
                    )

                # Pacing is a floor on spacing between iteration starts
                if cfg.pacing_ms > 0:
                    elapsed_ms = (time.perf_counter() - iter_start) * 1000.0
                    wait_ms = cfg.pacing_ms - elapsed_ms
                    if wait_ms > 0:
                        await asyncio.sleep(wait_ms / 1000.0)
        except asyncio.CancelledError:
            self.state = RunnerState.STOPPED
            raise

        self.state = (
            RunnerState.STOPPED if self._stop_event.is_set() else RunnerState.COMPLETED
        )
        logger.info(
            "Load test '%s' %s after %d iteration(s)",
            cfg.test_name,
            self.state.value,
            self.iteration_count,
        )
        return self.collector.generate_report(cfg.test_name)
