"""Lifecycle events emitted by the test runner.

Each event kind is its own model carrying exactly the fields that kind
needs; anything else is rejected when the payload is parsed.
"""

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import Field, TypeAdapter, ValidationError

from bdd_telemetry.errors import MalformedEventError, UnsupportedEventKindError
from bdd_telemetry.models.base import Model

Status: TypeAlias = Literal["passed", "failed", "skipped", "pending", "undefined"]

TERMINAL_STATUSES: frozenset[str] = frozenset({"passed", "failed", "skipped"})
INCOMPLETE_STATUSES: frozenset[str] = frozenset({"pending", "undefined"})

Identifier = Annotated[str, Field(min_length=1)]
Millis = Annotated[float, Field(ge=0)]


class _Event(Model):
    """Fields shared by every event kind."""

    worker_id: Identifier = Field(..., description="Worker that emitted the event")
    feature_id: Identifier = Field(..., description="Feature the event addresses")
    name: str | None = Field(default=None, description="Human-readable node name")
    timestamp: datetime | None = Field(
        default=None, description="When the runner observed the transition"
    )


class FeatureStarted(_Event):
    """A feature began executing."""

    kind: Literal["FeatureStarted"] = "FeatureStarted"


class FeatureFinished(_Event):
    """A feature finished executing."""

    kind: Literal["FeatureFinished"] = "FeatureFinished"
    status: Status
    duration_millis: Millis | None = None
    error_message: str | None = None


class ScenarioStarted(_Event):
    """A scenario began executing."""

    kind: Literal["ScenarioStarted"] = "ScenarioStarted"
    scenario_id: Identifier


class ScenarioFinished(_Event):
    """A scenario finished executing."""

    kind: Literal["ScenarioFinished"] = "ScenarioFinished"
    scenario_id: Identifier
    status: Status
    duration_millis: Millis | None = None
    error_message: str | None = None


class StepStarted(_Event):
    """A step began executing."""

    kind: Literal["StepStarted"] = "StepStarted"
    scenario_id: Identifier
    step_index: int = Field(..., ge=0)
    service: str | None = Field(
        default=None, description="Service the step exercised (s3, sqs, ...)"
    )


class StepFinished(_Event):
    """A step finished executing."""

    kind: Literal["StepFinished"] = "StepFinished"
    scenario_id: Identifier
    step_index: int = Field(..., ge=0)
    status: Status
    duration_millis: Millis | None = None
    error_message: str | None = None
    service: str | None = None


class HookFailed(_Event):
    """A before/after hook failed for a scenario, or a feature when unscoped."""

    kind: Literal["HookFailed"] = "HookFailed"
    scenario_id: Identifier | None = None
    status: Status = "failed"
    error_message: str | None = None


Event = Annotated[
    FeatureStarted
    | FeatureFinished
    | ScenarioStarted
    | ScenarioFinished
    | StepStarted
    | StepFinished
    | HookFailed,
    Field(discriminator="kind"),
]

RawEvent: TypeAlias = Event | Mapping[str, Any] | str | bytes

EVENT_TYPES = (
    FeatureStarted,
    FeatureFinished,
    ScenarioStarted,
    ScenarioFinished,
    StepStarted,
    StepFinished,
    HookFailed,
)

_event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


def parse_event(payload: RawEvent) -> Event:
    """Validate a raw payload into a typed event.

    Accepts an already-typed event, a mapping, or JSON text. Keys may use
    snake_case or camelCase; keys whose value is ``null`` are treated as
    absent.

    Raises:
        MalformedEventError: If required fields for the kind are missing or
            any value is invalid (e.g. a negative duration).
        UnsupportedEventKindError: If ``kind`` names no known event.

    """
    if isinstance(payload, EVENT_TYPES):
        return payload

    if isinstance(payload, str | bytes):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise MalformedEventError(f"Event is not valid JSON: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise MalformedEventError(
            f"Event must be an object, got {type(payload).__name__}"
        )

    data = {key: value for key, value in payload.items() if value is not None}
    try:
        return _event_adapter.validate_python(data)
    except ValidationError as exc:
        if any(error["type"] == "union_tag_invalid" for error in exc.errors()):
            raise UnsupportedEventKindError(
                f"Unsupported event kind: {data.get('kind')!r}"
            ) from exc
        raise MalformedEventError(
            f"Malformed {data.get('kind', 'event')}: {describe_errors(exc)}"
        ) from exc


def describe_errors(exc: ValidationError) -> str:
    """Flatten a validation error into a single line."""
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'event'}: {error['msg']}"
        for error in exc.errors()
    )
