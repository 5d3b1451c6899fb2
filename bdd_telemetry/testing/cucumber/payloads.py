"""Payload helpers for Cucumber JSON reports in tests."""

from collections.abc import Sequence
from typing import Any


def step(
    *,
    keyword: str = "Given ",
    name: str = "a step",
    status: str = "passed",
    duration: float | None = 1_500_000,
    error_message: str | None = None,
    hidden: bool | None = None,
) -> dict[str, Any]:
    """Create a step entry; durations are in nanoseconds like cucumber-js."""
    result: dict[str, Any] = {"status": status}
    if duration is not None:
        result["duration"] = duration
    if error_message is not None:
        result["error_message"] = error_message

    payload: dict[str, Any] = {
        "keyword": keyword,
        "name": name,
        "line": 5,
        "match": {"location": "features/step_definitions/steps.ts:12"},
        "result": result,
    }
    if hidden is not None:
        payload["hidden"] = hidden
    return payload


def hook(*, status: str = "passed", error_message: str | None = None) -> dict[str, Any]:
    """Create a before/after hook entry."""
    result: dict[str, Any] = {"status": status, "duration": 100_000}
    if error_message is not None:
        result["error_message"] = error_message
    return {"match": {"location": "features/support/hooks.ts:3"}, "result": result}


def scenario(
    *,
    scenario_id: str | None = "feature;scenario",
    name: str = "A scenario",
    steps: Sequence[dict[str, Any]] = (),
    element_type: str = "scenario",
    before: Sequence[dict[str, Any]] = (),
    after: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Create a scenario (or background) element."""
    payload: dict[str, Any] = {
        "keyword": "Background" if element_type == "background" else "Scenario",
        "name": name,
        "line": 3,
        "type": element_type,
        "steps": list(steps),
        "tags": [],
    }
    if scenario_id is not None:
        payload["id"] = scenario_id
    if before:
        payload["before"] = list(before)
    if after:
        payload["after"] = list(after)
    return payload


def feature(
    *,
    feature_id: str | None = "feature",
    name: str = "A feature",
    uri: str = "features/a.feature",
    elements: Sequence[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Create a feature entry of a Cucumber JSON report."""
    payload: dict[str, Any] = {
        "keyword": "Feature",
        "name": name,
        "uri": uri,
        "line": 1,
        "description": "",
        "elements": list(elements),
        "tags": [],
    }
    if feature_id is not None:
        payload["id"] = feature_id
    return payload
