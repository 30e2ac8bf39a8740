#!/usr/bin/env python3
"""Run an HTTP load test from the command line or a scenario file."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional, Sequence

import httpx

from pacebench.config import settings
from pacebench.core.http_actions import http_action
from pacebench.core.load_test_runner import LoadTestRunner
from pacebench.core.scenario_loader import Scenario, load_scenario, scenario_from_dict
from pacebench.core.thresholds import evaluate_thresholds, format_threshold_summary
from pacebench.core.user_pool import UserPool
from pacebench.exceptions import PaceBenchError
from pacebench.logging_config import configure_logging
from pacebench.models import PerformanceReport

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_THRESHOLD_BREACH = 1
EXIT_SCRIPT_ERROR = 2
EXIT_INTERRUPTED = 130

_LOAD_FLAGS = ("iterations", "duration_ms", "pacing_ms", "think_time_ms", "users")
_THRESHOLD_FLAGS = ("max_error_rate", "max_p95_ms", "min_throughput")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pacebench",
        description="Run a paced HTTP load test and report nearest-rank percentiles.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--scenario", help="Path to a YAML scenario file.")
    source.add_argument("--url", help="URL to request once per transaction.")

    parser.add_argument("--name", default=None, help="Test name (defaults to the URL).")
    parser.add_argument("--method", default="GET", help="HTTP method (default GET).")
    parser.add_argument(
        "--expected-status",
        type=int,
        action="append",
        default=None,
        help="Accepted status code; repeat for several. Default: any non-error status.",
    )
    parser.add_argument("--iterations", type=int, default=None, help="Iterations to run.")
    parser.add_argument(
        "--duration-ms",
        type=float,
        default=None,
        help="Run for this long instead of a fixed iteration count.",
    )
    parser.add_argument(
        "--pacing-ms",
        type=float,
        default=None,
        help="Minimum time between iteration starts.",
    )
    parser.add_argument(
        "--think-time-ms",
        type=float,
        default=None,
        help="Pause before each request.",
    )
    parser.add_argument("--users", type=int, default=None, help="Concurrent users.")
    parser.add_argument(
        "--max-error-rate", type=float, default=None, help="Fail above this error rate (%%)."
    )
    parser.add_argument(
        "--max-p95-ms", type=float, default=None, help="Fail above this p95 duration."
    )
    parser.add_argument(
        "--min-throughput", type=float, default=None, help="Fail below this ops/sec."
    )
    parser.add_argument(
        "--json", action="store_true", help="Write report(s) to stdout as JSON."
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL.")
    return parser


def _build_scenario(args: argparse.Namespace) -> Scenario:
    """Combine a scenario file (or --url) with command-line overrides."""
    if args.scenario:
        base = load_scenario(args.scenario)
        data: dict[str, Any] = {
            "name": args.name or base.config.test_name,
            "request": base.request.model_dump(by_alias=True),
            "load": base.config.model_dump(exclude={"test_name"}),
            "thresholds": base.thresholds.model_dump(exclude_none=True),
        }
        source = base.source
    else:
        request: dict[str, Any] = {"method": args.method, "url": args.url}
        if args.expected_status:
            request["expected_status"] = list(args.expected_status)
        data = {
            "name": args.name or f"{args.method.upper()} {args.url}",
            "request": request,
            "load": {
                "pacing_ms": settings.DEFAULT_PACING_MS,
                "think_time_ms": settings.DEFAULT_THINK_TIME_MS,
            },
            "thresholds": {},
        }
        source = None

    for flag in _LOAD_FLAGS:
        value = getattr(args, flag)
        if value is not None:
            data["load"][flag] = value
    for flag in _THRESHOLD_FLAGS:
        value = getattr(args, flag)
        if value is not None:
            data["thresholds"][flag] = value

    return scenario_from_dict(data, source=source)


async def _run(
    args: argparse.Namespace,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    scenario = _build_scenario(args)
    req = scenario.request

    async with httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport
    ) as client:

        def _make_action():
            return http_action(
                client,
                req.method,
                req.url,
                expected_status=req.expected_status,
                headers=req.headers or None,
                json=req.json_body,
            )

        reports: list[PerformanceReport]
        if scenario.config.users > 1:
            reports = await UserPool(scenario.config).run(lambda _user_id: _make_action())
        else:
            reports = [await LoadTestRunner(scenario.config).run(_make_action())]

    breached = False
    for report in reports:
        if not scenario.thresholds.is_empty:
            print(format_threshold_summary(report, scenario.thresholds))
        if evaluate_thresholds(report, scenario.thresholds):
            breached = True

    if args.json:
        payload = [r.model_dump(mode="json") for r in reports]
        print(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2))

    return EXIT_THRESHOLD_BREACH if breached else EXIT_PASS


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(_run(args))
    except PaceBenchError as e:
        print(f"Load test failed: {e}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR
    except KeyboardInterrupt:
        print("[pacebench] interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
