"""
In-process concurrent users.

Runs ``config.users`` independent LoadTestRunner instances side by side on
one event loop. Each user keeps its own collector and strictly sequential
iterations; only the stop signal is shared.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Mapping, Union

from pacebench.core.load_test_runner import Action, LoadTestRunner
from pacebench.models import LoadTestConfig, PerformanceReport

logger = logging.getLogger(__name__)

ActionFactory = Callable[[int], Action]


class UserPool:
    """Fan-out of one runner per simulated user."""

    def __init__(self, config: Union[LoadTestConfig, Mapping[str, Any]]):
        if not isinstance(config, LoadTestConfig):
            config = LoadTestConfig.model_validate(dict(config))
        self.config = config
        self._stop_event = asyncio.Event()
        self.runners: List[LoadTestRunner] = [
            LoadTestRunner(
                config.model_copy(
                    update={"test_name": f"{config.test_name} [user-{user_id}]"}
                ),
                stop_event=self._stop_event,
            )
            for user_id in range(1, config.users + 1)
        ]

    @property
    def count(self) -> int:
        return len(self.runners)

    def stop(self) -> None:
        """Signal every runner to stop before its next iteration."""
        self._stop_event.set()

    async def run(self, action_factory: ActionFactory) -> List[PerformanceReport]:
        """
        Run all users concurrently.

        Args:
            action_factory: Called once per user with the 1-based user id;
                returns that user's action

        Returns:
            One report per user, in user order
        """
        logger.info(
            "Starting %d user(s) for load test '%s'", self.count, self.config.test_name
        )
        tasks = [
            runner.run(action_factory(user_id))
            for user_id, runner in enumerate(self.runners, start=1)
        ]
        return list(await asyncio.gather(*tasks))
