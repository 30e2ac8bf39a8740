"""
Scenario Loader

Loads load test scenarios from YAML files. A scenario bundles the run
configuration, an HTTP request to exercise, and optional thresholds.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from pacebench.core.thresholds import PerformanceThresholds
from pacebench.exceptions import ScenarioError
from pacebench.models import LoadTestConfig

logger = logging.getLogger(__name__)


class RequestSpec(BaseModel):
    """HTTP request executed once per transaction."""

    method: str = Field("GET", description="HTTP method")
    url: str = Field(..., description="Target URL")
    expected_status: Optional[Union[int, List[int]]] = Field(
        None, description="Accepted status code(s)"
    )
    headers: Dict[str, str] = Field(default_factory=dict, description="Request headers")
    json_body: Optional[Any] = Field(None, alias="json", description="JSON request body")


class Scenario(BaseModel):
    """A named load test loaded from a scenario file."""

    config: LoadTestConfig
    request: RequestSpec
    thresholds: PerformanceThresholds = Field(default_factory=PerformanceThresholds)
    source: Optional[str] = Field(None, description="File the scenario was read from")


def scenario_from_dict(data: Dict[str, Any], source: Optional[str] = None) -> Scenario:
    """
    Build a Scenario from parsed YAML data.

    Expected keys: ``name``, ``request``, optional ``load`` and ``thresholds``.
    """
    if not isinstance(data, dict):
        raise ScenarioError(f"Scenario must be a mapping: {source or '<dict>'}")

    name = data.get("name") or (Path(source).stem if source else None)
    if not name:
        raise ScenarioError("Scenario requires a name")
    if "request" not in data:
        raise ScenarioError(f"Scenario '{name}' has no request section")

    load = dict(data.get("load") or {})
    load["test_name"] = name

    try:
        return Scenario(
            config=LoadTestConfig(**load),
            request=RequestSpec.model_validate(data["request"]),
            thresholds=PerformanceThresholds(**(data.get("thresholds") or {})),
            source=source,
        )
    except (ValidationError, TypeError) as e:
        raise ScenarioError(f"Invalid scenario '{name}': {e}") from e


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario from a YAML file.

    Args:
        path: Path to the scenario file

    Returns:
        Parsed Scenario
    """
    scenario_file = Path(path)
    if not scenario_file.exists():
        raise ScenarioError(f"Scenario not found: {scenario_file}")

    try:
        with open(scenario_file, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ScenarioError(f"Could not parse {scenario_file}: {e}") from e

    scenario = scenario_from_dict(data, source=str(scenario_file))
    logger.info("Loaded scenario '%s' from %s", scenario.config.test_name, scenario_file)
    return scenario
