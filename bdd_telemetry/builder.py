"""Result tree builder fed by lifecycle events from concurrent workers."""

import logging
import threading
from collections.abc import Iterable
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypeAlias

from bdd_telemetry.errors import (
    ConflictingOutcomeError,
    MalformedEventError,
    UnsupportedEventKindError,
)
from bdd_telemetry.models.events import (
    Event,
    FeatureFinished,
    FeatureStarted,
    HookFailed,
    RawEvent,
    ScenarioFinished,
    ScenarioStarted,
    Status,
    StepFinished,
    StepStarted,
    parse_event,
)
from bdd_telemetry.models.tree import (
    FeatureResult,
    ResultTree,
    ScenarioResult,
    StepResult,
)
from bdd_telemetry.rollup import derive_node_status, derive_step_status

log = logging.getLogger(__name__)

StartEvent: TypeAlias = FeatureStarted | ScenarioStarted | StepStarted
FinishEvent: TypeAlias = FeatureFinished | ScenarioFinished | StepFinished


@dataclass(frozen=True, kw_only=True)
class IngestReport:
    """Outcome of feeding a stream of events into the builder."""

    accepted: int
    rejected: int


@dataclass(kw_only=True)
class _Node:
    """Mutable state shared by every level of the live tree."""

    name: str | None = None
    worker_id: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    duration_millis: float | None = None
    error_message: str | None = None
    reported: Status | None = None
    status: Status = "pending"

    @property
    def finished(self) -> bool:
        return self.reported is not None

    def start(self, event: StartEvent) -> None:
        """Record a start; repeated or late starts never undo a finish."""
        if event.name and self.name is None:
            self.name = event.name
        if self.started_at is None:
            self.started_at = event.timestamp
        if self.worker_id is None:
            self.worker_id = event.worker_id

    def finish(self, event: FinishEvent, label: str) -> ConflictingOutcomeError | None:
        """Record a terminal event, keeping the last one observed."""
        conflict = None
        if self.reported is not None and self.reported != event.status:
            conflict = ConflictingOutcomeError(label, self.reported, event.status)

        if event.name and self.name is None:
            self.name = event.name
        self.reported = event.status
        self.worker_id = event.worker_id
        self.finished_at = event.timestamp
        self.error_message = event.error_message
        self.duration_millis = event.duration_millis
        return conflict

    def measured_duration(self) -> float | None:
        """Reported duration, else the span between start and finish."""
        if self.duration_millis is not None:
            return self.duration_millis
        if self.started_at is None or self.finished_at is None:
            return None
        elapsed = self.finished_at - self.started_at
        return max(elapsed.total_seconds() * 1000, 0.0)


@dataclass(kw_only=True)
class _StepNode(_Node):
    index: int
    service: str | None = None

    def refresh(self) -> None:
        self.status = derive_step_status(finished=self.finished, reported=self.reported)

    def freeze(self) -> StepResult:
        return StepResult(
            index=self.index,
            name=self.name or f"Step {self.index + 1}",
            status=self.status,
            service=self.service,
            worker_id=self.worker_id,
            started_at=self.started_at,
            finished_at=self.finished_at,
            duration_millis=self.measured_duration(),
            error_message=self.error_message,
        )


@dataclass(kw_only=True)
class _ScenarioNode(_Node):
    scenario_id: str
    hook_failed: bool = False
    hook_error: str | None = None
    steps: dict[int, _StepNode] = field(default_factory=dict)

    def step(self, index: int) -> _StepNode:
        if (node := self.steps.get(index)) is None:
            node = self.steps[index] = _StepNode(index=index)
        return node

    def refresh(self) -> None:
        self.status = derive_node_status(
            finished=self.finished,
            reported=self.reported,
            hook_failed=self.hook_failed,
            children=[step.status for step in self.steps.values()],
        )

    def freeze(self) -> ScenarioResult:
        return ScenarioResult(
            scenario_id=self.scenario_id,
            name=self.name or self.scenario_id,
            status=self.status,
            steps=tuple(
                self.steps[index].freeze() for index in sorted(self.steps)
            ),
            worker_id=self.worker_id,
            started_at=self.started_at,
            finished_at=self.finished_at,
            duration_millis=self.measured_duration(),
            error_message=self.error_message or self.hook_error,
        )


@dataclass(kw_only=True)
class _FeatureNode(_Node):
    feature_id: str
    hook_failed: bool = False
    hook_error: str | None = None
    scenarios: dict[str, _ScenarioNode] = field(default_factory=dict)

    def scenario(self, scenario_id: str) -> _ScenarioNode:
        if (node := self.scenarios.get(scenario_id)) is None:
            node = self.scenarios[scenario_id] = _ScenarioNode(scenario_id=scenario_id)
        return node

    def refresh(self) -> None:
        self.status = derive_node_status(
            finished=self.finished,
            reported=self.reported,
            hook_failed=self.hook_failed,
            children=[scenario.status for scenario in self.scenarios.values()],
        )

    def freeze(self) -> FeatureResult:
        return FeatureResult(
            feature_id=self.feature_id,
            name=self.name or self.feature_id,
            status=self.status,
            scenarios=tuple(
                scenario.freeze() for scenario in self.scenarios.values()
            ),
            worker_id=self.worker_id,
            started_at=self.started_at,
            finished_at=self.finished_at,
            duration_millis=self.measured_duration(),
            error_message=self.error_message or self.hook_error,
        )


@dataclass(kw_only=True)
class _FeatureEntry:
    node: _FeatureNode
    lock: threading.Lock = field(default_factory=threading.Lock)


class ResultTreeBuilder:
    """Builds the result tree of one run from lifecycle events.

    Nodes are addressed by identifier, so events may arrive interleaved or
    out of order from several workers; missing ancestors are created on
    demand. Each feature has its own lock, so workers reporting on
    different features never contend. ``snapshot`` returns an immutable
    copy and is the only way tree state leaves the builder.
    """

    def __init__(self) -> None:
        self._registry_lock = threading.Lock()
        self._version_lock = threading.Lock()
        self._features: dict[str, _FeatureEntry] = {}
        self._version = 0
        self._conflicts: list[ConflictingOutcomeError] = []
        self._cached: ResultTree | None = None

    @property
    def version(self) -> int:
        """Run-wide counter incremented by every applied event."""
        with self._version_lock:
            return self._version

    @property
    def conflicts(self) -> tuple[ConflictingOutcomeError, ...]:
        """Conflicting terminal outcomes observed during the run."""
        with self._version_lock:
            return tuple(self._conflicts)

    def ingest(self, event: RawEvent) -> int:
        """Apply one event and return the new run version.

        Raises:
            MalformedEventError: If the payload is missing identity fields
                or carries invalid values.
            UnsupportedEventKindError: If the payload kind is unknown.

        """
        event = parse_event(event)
        while True:
            entry = self._feature_entry(event.feature_id)
            with entry.lock:
                # a reset between lookup and locking discards the entry
                if self._features.get(event.feature_id) is not entry:
                    continue
                conflict = self._apply(entry.node, event)
                with self._version_lock:
                    self._version += 1
                    if conflict is not None:
                        self._conflicts.append(conflict)
                    version = self._version
                break

        if conflict is not None:
            log.warning("%s (keeping the last outcome)", conflict)
        return version

    def ingest_many(self, events: Iterable[RawEvent]) -> IngestReport:
        """Apply a stream of events, rejecting bad ones individually."""
        accepted = rejected = 0
        for event in events:
            try:
                self.ingest(event)
            except (MalformedEventError, UnsupportedEventKindError) as exc:
                rejected += 1
                log.warning("Rejected event: %s", exc)
            else:
                accepted += 1

        log.debug("Ingested %d event(s), rejected %d", accepted, rejected)
        return IngestReport(accepted=accepted, rejected=rejected)

    def snapshot(self) -> ResultTree:
        """Return a consistent, immutable copy of the tree."""
        with self._registry_lock:
            entries = list(self._features.values())
            with ExitStack() as stack:
                for entry in entries:
                    stack.enter_context(entry.lock)

                version = self.version
                if self._cached is not None and self._cached.version == version:
                    return self._cached

                tree = ResultTree(
                    features=tuple(entry.node.freeze() for entry in entries),
                    version=version,
                )
            self._cached = tree
        return tree

    def reset(self) -> None:
        """Discard all state so a new run can begin."""
        with self._registry_lock:
            with ExitStack() as stack:
                for entry in self._features.values():
                    stack.enter_context(entry.lock)
                self._features = {}
                with self._version_lock:
                    self._version += 1
                    self._conflicts.clear()
            self._cached = None
        log.debug("Result tree reset")

    def _feature_entry(self, feature_id: str) -> _FeatureEntry:
        with self._registry_lock:
            if (entry := self._features.get(feature_id)) is None:
                entry = _FeatureEntry(node=_FeatureNode(feature_id=feature_id))
                self._features[feature_id] = entry
            return entry

    def _apply(
        self, feature: _FeatureNode, event: Event
    ) -> ConflictingOutcomeError | None:
        """Apply an event to a feature and refresh statuses along its path."""
        conflict = None
        scenario: _ScenarioNode | None = None

        match event:
            case FeatureStarted():
                feature.start(event)
            case FeatureFinished():
                conflict = feature.finish(event, f"feature {event.feature_id!r}")
            case ScenarioStarted():
                scenario = feature.scenario(event.scenario_id)
                scenario.start(event)
            case ScenarioFinished():
                scenario = feature.scenario(event.scenario_id)
                conflict = scenario.finish(
                    event,
                    f"scenario {event.scenario_id!r} of feature {event.feature_id!r}",
                )
            case StepStarted() | StepFinished():
                scenario = feature.scenario(event.scenario_id)
                step = scenario.step(event.step_index)
                if event.service:
                    step.service = event.service
                if isinstance(event, StepStarted):
                    step.start(event)
                else:
                    conflict = step.finish(
                        event,
                        f"step {event.step_index} of scenario {event.scenario_id!r}",
                    )
                step.refresh()
            case HookFailed(scenario_id=None):
                feature.hook_failed = True
                feature.hook_error = event.error_message or feature.hook_error
            case HookFailed():
                scenario = feature.scenario(event.scenario_id)
                scenario.hook_failed = True
                scenario.hook_error = event.error_message or scenario.hook_error
            case _:
                raise UnsupportedEventKindError(
                    f"Unsupported event: {type(event).__name__}"
                )

        if scenario is not None:
            scenario.refresh()
        feature.refresh()
        return conflict
