"""Read-only metrics derived from a result tree snapshot."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from bdd_telemetry.models.events import Status

UNCLASSIFIED = "unclassified"


@dataclass(frozen=True, kw_only=True)
class StatusCounts:
    """Number of nodes per status at one level of the tree."""

    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    pending: int = 0
    undefined: int = 0

    @classmethod
    def from_statuses(cls, statuses: Iterable[Status]) -> "StatusCounts":
        counts = Counter(statuses)
        return cls(
            total=counts.total(),
            passed=counts["passed"],
            failed=counts["failed"],
            skipped=counts["skipped"],
            pending=counts["pending"],
            undefined=counts["undefined"],
        )


@dataclass(frozen=True, kw_only=True)
class DurationStats:
    """Duration statistics in milliseconds.

    Every value is ``None`` when nothing was measured; zero would claim an
    instantaneous measurement.
    """

    count: int = 0
    min: float | None = None
    max: float | None = None
    mean: float | None = None
    p50: float | None = None
    p95: float | None = None


@dataclass(frozen=True, kw_only=True)
class ServiceMetrics:
    """Step counts and durations for a single service tag."""

    service: str
    steps: StatusCounts
    durations: DurationStats


@dataclass(frozen=True, kw_only=True)
class Metrics:
    """Rollup statistics for one snapshot of a run."""

    features: StatusCounts
    scenarios: StatusCounts
    steps: StatusCounts
    step_durations: DurationStats
    services: tuple[ServiceMetrics, ...] = ()
    pass_rate: float = 0.0
    average_scenario_millis: float | None = None
    slowest_feature: str | None = None
    slowest_scenario: str | None = None
    slowest_step: str | None = None
    tree_version: int = 0
