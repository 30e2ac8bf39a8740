"""
HTTP actions for API load tests.

Builds zero-argument coroutine functions around an ``httpx.AsyncClient``
so that an API call can be handed to LoadTestRunner like any other action.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Collection, Optional, Union

import httpx

from pacebench.exceptions import UnexpectedStatusError

logger = logging.getLogger(__name__)


def _normalize_expected(
    expected_status: Union[int, Collection[int], None],
) -> Optional[frozenset[int]]:
    if expected_status is None:
        return None
    if isinstance(expected_status, int):
        return frozenset({expected_status})
    return frozenset(int(s) for s in expected_status)


def http_action(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    expected_status: Union[int, Collection[int], None] = None,
    **request_kwargs: Any,
) -> Callable[[], Awaitable[httpx.Response]]:
    """
    Create an action that sends one HTTP request per call.

    Args:
        client: Shared async client (connection pooling, base_url, timeouts)
        method: HTTP method
        url: Absolute URL or path relative to the client's base_url
        expected_status: Accepted status code(s); when omitted any 4xx/5xx fails
        **request_kwargs: Passed through to ``client.request`` (json, headers, ...)

    Returns:
        Coroutine function suitable for LoadTestRunner.run
    """
    method = method.upper()
    expected = _normalize_expected(expected_status)

    async def _action() -> httpx.Response:
        response = await client.request(method, url, **request_kwargs)
        logger.debug("%s %s -> %d", method, url, response.status_code)
        if expected is None:
            response.raise_for_status()
        elif response.status_code not in expected:
            raise UnexpectedStatusError(method, url, response.status_code, expected)
        return response

    return _action
