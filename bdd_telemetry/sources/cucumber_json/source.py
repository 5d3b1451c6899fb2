"""Event source replaying a Cucumber JSON report."""

import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from pydantic import ValidationError

from bdd_telemetry.errors import ReportSourceError
from bdd_telemetry.models.events import (
    Event,
    FeatureFinished,
    FeatureStarted,
    HookFailed,
    ScenarioFinished,
    ScenarioStarted,
    Status,
    StepFinished,
    StepStarted,
    describe_errors,
)
from bdd_telemetry.sources.base import EventSource, read_source_text
from bdd_telemetry.sources.cucumber_json.config import CucumberJsonConfig
from bdd_telemetry.sources.cucumber_json.models import (
    CucumberElement,
    CucumberFeature,
    CucumberResult,
    CucumberStep,
    cucumber_report_adapter,
)

log = logging.getLogger(__name__)

CUCUMBER_TO_STATUS: dict[str, Status] = {
    "passed": "passed",
    "failed": "failed",
    "skipped": "skipped",
    "pending": "pending",
    "undefined": "undefined",
    "ambiguous": "failed",
}

# Checked in order; state machines before lambda since both mention functions
SERVICE_PATTERNS: Sequence[tuple[str, re.Pattern[str]]] = (
    ("stepfunctions", re.compile(r"step ?functions?|state machine", re.IGNORECASE)),
    ("s3", re.compile(r"\bs3\b|\bbucket", re.IGNORECASE)),
    ("sqs", re.compile(r"\bsqs\b|\bqueue", re.IGNORECASE)),
    ("lambda", re.compile(r"\blambda\b|\bfunction", re.IGNORECASE)),
)

HOOK_KEYWORDS = frozenset({"before", "after"})


def classify_service(step_text: str) -> str | None:
    """Guess which AWS service a step exercises from its wording."""
    for service, pattern in SERVICE_PATTERNS:
        if pattern.search(step_text):
            return service
    return None


def _rollup(statuses: Sequence[Status], hook_failed: bool = False) -> Status:
    if hook_failed or any(s not in ("passed", "skipped") for s in statuses):
        return "failed"
    if statuses and all(s == "skipped" for s in statuses):
        return "skipped"
    return "passed"


@dataclass(frozen=True, kw_only=True)
class CucumberJsonSource(EventSource):
    """Replays a Cucumber JSON report as lifecycle events."""

    config: CucumberJsonConfig

    @classmethod
    def from_config(cls, config: CucumberJsonConfig) -> "CucumberJsonSource":
        """Create source from configuration."""
        return cls(config=config)

    def load_report(self) -> Sequence[CucumberFeature]:
        """Read and validate the report file."""
        text = read_source_text(self.config.path)
        try:
            return cucumber_report_adapter.validate_json(text)
        except ValidationError as exc:
            raise ReportSourceError(
                f"Invalid Cucumber report {self.config.path}: {describe_errors(exc)}"
            ) from exc

    def events(self) -> Iterator[Event]:
        report = self.load_report()
        log.info("Replaying %d feature(s) from %s", len(report), self.config.path)
        for position, feature in enumerate(report):
            yield from self._feature_events(feature, position)

    def _millis(self, result: CucumberResult) -> float | None:
        if result.duration is None:
            return None
        if self.config.duration_unit == "ns":
            return result.duration / 1_000_000
        return result.duration

    def _feature_events(
        self, feature: CucumberFeature, position: int
    ) -> Iterator[Event]:
        worker_id = self.config.worker_id
        feature_id = feature.id or feature.uri or f"feature-{position + 1}"
        yield FeatureStarted(worker_id=worker_id, feature_id=feature_id, name=feature.name)

        background: list[CucumberStep] = []
        seen: set[str] = set()
        statuses: list[Status] = []
        total_millis = 0.0

        for index, element in enumerate(feature.elements):
            if element.type == "background":
                background.extend(element.steps)
                continue

            scenario_id = element.id or f"{feature_id};scenario-{index + 1}"
            if scenario_id in seen:
                scenario_id = f"{scenario_id}#{index + 1}"
            seen.add(scenario_id)

            events, finished = self._scenario_events(
                feature_id, scenario_id, element, background
            )
            background = []
            statuses.append(finished.status)
            total_millis += finished.duration_millis or 0.0
            yield from events

        yield FeatureFinished(
            worker_id=worker_id,
            feature_id=feature_id,
            name=feature.name,
            status=_rollup(statuses),
            duration_millis=total_millis,
        )

    def _scenario_events(
        self,
        feature_id: str,
        scenario_id: str,
        element: CucumberElement,
        background: Sequence[CucumberStep],
    ) -> tuple[list[Event], ScenarioFinished]:
        """Build a scenario's events, returning its finish event separately."""
        worker_id = self.config.worker_id
        events: list[Event] = [
            ScenarioStarted(
                worker_id=worker_id,
                feature_id=feature_id,
                scenario_id=scenario_id,
                name=element.name,
            )
        ]

        hook_results = [hook.result for hook in (*element.before, *element.after)]
        statuses: list[Status] = []
        total_millis = 0.0

        steps: list[CucumberStep] = []
        for step in (*background, *element.steps):
            if step.hidden or step.keyword.strip().lower() in HOOK_KEYWORDS:
                hook_results.append(step.result)
            else:
                steps.append(step)

        for step_index, step in enumerate(steps):
            name = f"{step.keyword.strip()} {step.name}".strip()
            status = CUCUMBER_TO_STATUS.get(step.result.status, "undefined")
            millis = self._millis(step.result)
            service = classify_service(step.name)
            events.append(
                StepStarted(
                    worker_id=worker_id,
                    feature_id=feature_id,
                    scenario_id=scenario_id,
                    step_index=step_index,
                    name=name,
                    service=service,
                )
            )
            events.append(
                StepFinished(
                    worker_id=worker_id,
                    feature_id=feature_id,
                    scenario_id=scenario_id,
                    step_index=step_index,
                    name=name,
                    status=status,
                    duration_millis=millis,
                    error_message=step.result.error_message,
                    service=service,
                )
            )
            statuses.append(status)
            total_millis += millis or 0.0

        failed_hooks = [r for r in hook_results if r.status in ("failed", "ambiguous")]
        events.extend(
            HookFailed(
                worker_id=worker_id,
                feature_id=feature_id,
                scenario_id=scenario_id,
                name="hook",
                error_message=result.error_message,
            )
            for result in failed_hooks
        )

        finished = ScenarioFinished(
            worker_id=worker_id,
            feature_id=feature_id,
            scenario_id=scenario_id,
            name=element.name,
            status=_rollup(statuses, hook_failed=bool(failed_hooks)),
            duration_millis=total_millis,
        )
        events.append(finished)
        return events, finished
