"""Metrics engine computing rollups over a result tree snapshot."""

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence

from bdd_telemetry.models.metrics import (
    UNCLASSIFIED,
    DurationStats,
    Metrics,
    ServiceMetrics,
    StatusCounts,
)
from bdd_telemetry.models.tree import ResultTree, ScenarioResult, StepResult


def nearest_rank(sorted_values: Sequence[float], percentile: float) -> float:
    """Return the nearest-rank percentile of an ascending, non-empty sequence.

    The rank is ``ceil(percentile / 100 * n)`` clamped to ``[1, n]``, so
    p50 of ``[10, 20, 30, 40]`` is 20 and p95 is 40.
    """
    if not sorted_values:
        raise ValueError("nearest_rank requires at least one value")
    rank = math.ceil(percentile / 100 * len(sorted_values))
    rank = min(max(rank, 1), len(sorted_values))
    return sorted_values[rank - 1]


def duration_stats(durations: Iterable[float]) -> DurationStats:
    """Compute duration statistics; empty input yields ``None`` values."""
    values = sorted(durations)
    if not values:
        return DurationStats()

    return DurationStats(
        count=len(values),
        min=values[0],
        max=values[-1],
        mean=math.fsum(values) / len(values),
        p50=nearest_rank(values, 50),
        p95=nearest_rank(values, 95),
    )


def scenario_duration(scenario: ScenarioResult) -> float | None:
    """Measured scenario duration, falling back to the sum of its steps."""
    if scenario.duration_millis is not None:
        return scenario.duration_millis
    step_durations = [
        step.duration_millis
        for step in scenario.steps
        if step.duration_millis is not None
    ]
    return math.fsum(sorted(step_durations)) if step_durations else None


def _slowest(named_durations: Iterable[tuple[str, float | None]]) -> str | None:
    """Name with the largest duration; ties resolve to the smallest name."""
    measured = [(name, value) for name, value in named_durations if value is not None]
    if not measured:
        return None
    return min(measured, key=lambda item: (-item[1], item[0]))[0]


def _service_breakdown(steps: Sequence[StepResult]) -> tuple[ServiceMetrics, ...]:
    grouped: dict[str, list[StepResult]] = defaultdict(list)
    for step in steps:
        grouped[step.service or UNCLASSIFIED].append(step)

    return tuple(
        ServiceMetrics(
            service=service,
            steps=StatusCounts.from_statuses(step.status for step in members),
            durations=duration_stats(
                step.duration_millis
                for step in members
                if step.duration_millis is not None
            ),
        )
        for service, members in sorted(grouped.items())
    )


def compute_metrics(tree: ResultTree) -> Metrics:
    """Compute metrics for a snapshot.

    Pure: the same snapshot always yields equal metrics, whatever order its
    features were first observed in.
    """
    features = tree.features
    scenarios = list(tree.iter_scenarios())
    steps = list(tree.iter_steps())

    scenario_counts = StatusCounts.from_statuses(s.status for s in scenarios)
    pass_rate = (
        scenario_counts.passed / scenario_counts.total * 100
        if scenario_counts.total
        else 0.0
    )

    scenario_durations = sorted(
        value for s in scenarios if (value := scenario_duration(s)) is not None
    )
    average_scenario = (
        math.fsum(scenario_durations) / len(scenario_durations)
        if scenario_durations
        else None
    )

    return Metrics(
        features=StatusCounts.from_statuses(f.status for f in features),
        scenarios=scenario_counts,
        steps=StatusCounts.from_statuses(s.status for s in steps),
        step_durations=duration_stats(
            s.duration_millis for s in steps if s.duration_millis is not None
        ),
        services=_service_breakdown(steps),
        pass_rate=pass_rate,
        average_scenario_millis=average_scenario,
        slowest_feature=_slowest(
            (f.name, _feature_duration(f.duration_millis, f.scenarios))
            for f in features
        ),
        slowest_scenario=_slowest((s.name, scenario_duration(s)) for s in scenarios),
        slowest_step=_slowest((s.name, s.duration_millis) for s in steps),
        tree_version=tree.version,
    )


def _feature_duration(
    measured: float | None, scenarios: Sequence[ScenarioResult]
) -> float | None:
    if measured is not None:
        return measured
    durations = [
        value for s in scenarios if (value := scenario_duration(s)) is not None
    ]
    return math.fsum(sorted(durations)) if durations else None
