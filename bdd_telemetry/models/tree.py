"""Immutable result tree handed out by ``ResultTreeBuilder.snapshot``."""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime

from bdd_telemetry.models.events import Status


@dataclass(frozen=True, kw_only=True)
class StepResult:
    """Outcome of a single step."""

    index: int
    name: str
    status: Status
    service: str | None = None
    worker_id: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_millis: float | None = None
    error_message: str | None = None


@dataclass(frozen=True, kw_only=True)
class ScenarioResult:
    """Outcome of a scenario, with its steps ordered by index."""

    scenario_id: str
    name: str
    status: Status
    steps: tuple[StepResult, ...] = ()
    worker_id: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_millis: float | None = None
    error_message: str | None = None


@dataclass(frozen=True, kw_only=True)
class FeatureResult:
    """Outcome of a feature, with scenarios in first-seen order."""

    feature_id: str
    name: str
    status: Status
    scenarios: tuple[ScenarioResult, ...] = ()
    worker_id: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_millis: float | None = None
    error_message: str | None = None


@dataclass(frozen=True, kw_only=True)
class ResultTree:
    """Point-in-time copy of a run's Feature -> Scenario -> Step hierarchy."""

    features: tuple[FeatureResult, ...] = ()
    version: int = 0

    @property
    def is_empty(self) -> bool:
        """Whether no feature has been observed."""
        return not self.features

    def iter_scenarios(self) -> Iterator[ScenarioResult]:
        for feature in self.features:
            yield from feature.scenarios

    def iter_steps(self) -> Iterator[StepResult]:
        for scenario in self.iter_scenarios():
            yield from scenario.steps
