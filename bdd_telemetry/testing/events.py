"""Builders for lifecycle event streams in tests."""

from collections.abc import Mapping, Sequence
from typing import Any

from bdd_telemetry.models.events import (
    Event,
    FeatureFinished,
    FeatureStarted,
    ScenarioFinished,
    ScenarioStarted,
    Status,
    StepFinished,
    StepStarted,
)


def step_events(
    *,
    feature_id: str,
    scenario_id: str,
    index: int,
    status: Status = "passed",
    duration_millis: float | None = 10.0,
    service: str | None = None,
    worker_id: str = "worker-1",
) -> list[Event]:
    """Start and finish events for one step."""
    return [
        StepStarted(
            worker_id=worker_id,
            feature_id=feature_id,
            scenario_id=scenario_id,
            step_index=index,
            name=f"step {index}",
            service=service,
        ),
        StepFinished(
            worker_id=worker_id,
            feature_id=feature_id,
            scenario_id=scenario_id,
            step_index=index,
            name=f"step {index}",
            status=status,
            duration_millis=duration_millis,
            service=service,
        ),
    ]


def scenario_events(
    *,
    feature_id: str,
    scenario_id: str,
    step_statuses: Sequence[Status] = ("passed",),
    status: Status | None = None,
    worker_id: str = "worker-1",
) -> list[Event]:
    """Events for a complete scenario.

    The scenario's own finish status defaults to ``skipped`` when it has no
    steps, otherwise to ``failed`` if any step failed and ``passed`` if not.
    """
    if status is None:
        if not step_statuses:
            status = "skipped"
        elif "failed" in step_statuses:
            status = "failed"
        else:
            status = "passed"

    events: list[Event] = [
        ScenarioStarted(
            worker_id=worker_id,
            feature_id=feature_id,
            scenario_id=scenario_id,
            name=scenario_id,
        )
    ]
    for index, step_status in enumerate(step_statuses):
        events += step_events(
            feature_id=feature_id,
            scenario_id=scenario_id,
            index=index,
            status=step_status,
            worker_id=worker_id,
        )
    events.append(
        ScenarioFinished(
            worker_id=worker_id,
            feature_id=feature_id,
            scenario_id=scenario_id,
            name=scenario_id,
            status=status,
        )
    )
    return events


def feature_events(
    feature_id: str,
    scenarios: Mapping[str, Sequence[Status]],
    *,
    status: Status = "skipped",
    worker_id: str = "worker-1",
) -> list[Event]:
    """Events for a complete feature; ``scenarios`` maps ids to step statuses."""
    events: list[Event] = [
        FeatureStarted(worker_id=worker_id, feature_id=feature_id, name=feature_id)
    ]
    for scenario_id, step_statuses in scenarios.items():
        events += scenario_events(
            feature_id=feature_id,
            scenario_id=scenario_id,
            step_statuses=step_statuses,
            worker_id=worker_id,
        )
    events.append(
        FeatureFinished(
            worker_id=worker_id, feature_id=feature_id, name=feature_id, status=status
        )
    )
    return events


def event_payload(event: Event) -> dict[str, Any]:
    """Wire form of an event, as written to a JSON-lines log."""
    return event.model_dump(mode="json", by_alias=True, exclude_none=True)
