"""Plain-text dashboard, suitable for CI logs and terminals."""

from bdd_telemetry.models.config import DashboardConfig
from bdd_telemetry.models.metrics import DurationStats, Metrics, StatusCounts
from bdd_telemetry.models.tree import ResultTree
from bdd_telemetry.rendering.dashboard import EMPTY_MESSAGE
from bdd_telemetry.rendering.document import (
    Document,
    format_duration,
    truncate_features,
    truncation_notice,
)


def _counts_line(label: str, counts: StatusCounts) -> str:
    return (
        f"{label}: {counts.total} ({counts.passed} passed, {counts.failed} failed, "
        f"{counts.skipped} skipped, {counts.pending + counts.undefined} pending)"
    )


def _stats_line(label: str, stats: DurationStats) -> str:
    return (
        f"{label}: min {format_duration(stats.min)}, max {format_duration(stats.max)}, "
        f"mean {format_duration(stats.mean)}, p50 {format_duration(stats.p50)}, "
        f"p95 {format_duration(stats.p95)} ({stats.count} measured)"
    )


def render_text(tree: ResultTree, metrics: Metrics, config: DashboardConfig) -> Document:
    """Render the tree and metrics as plain text.

    Truncation, step details and performance sections follow the same rules
    as the HTML dashboard; the theme is ignored.
    """
    lines = [
        "Test Execution Dashboard",
        "=" * 24,
        _counts_line("Features", metrics.features),
        _counts_line("Scenarios", metrics.scenarios),
        _counts_line("Steps", metrics.steps),
        f"Pass rate: {metrics.pass_rate:.1f}%",
    ]

    if config.include_performance_metrics:
        lines += [
            "",
            "Performance",
            "-" * 11,
            _stats_line("Step durations", metrics.step_durations),
            "Average scenario duration: "
            f"{format_duration(metrics.average_scenario_millis)}",
            f"Slowest feature: {metrics.slowest_feature or 'N/A'}",
            f"Slowest scenario: {metrics.slowest_scenario or 'N/A'}",
            f"Slowest step: {metrics.slowest_step or 'N/A'}",
        ]
        lines += [
            _stats_line(f"  {service.service}", service.durations)
            for service in metrics.services
        ]

    lines.append("")
    if tree.is_empty:
        lines.append(EMPTY_MESSAGE)
    else:
        shown, omitted = truncate_features(tree.features, config.max_features_to_show)
        for feature in shown:
            lines.append(f"[{feature.status.upper()}] {feature.name}")
            for scenario in feature.scenarios:
                lines.append(f"  [{scenario.status.upper()}] {scenario.name}")
                if scenario.error_message:
                    lines.append(f"    error: {scenario.error_message}")
                if not config.include_step_details:
                    continue
                for step in scenario.steps:
                    lines.append(
                        f"    [{step.status}] {step.name} "
                        f"({format_duration(step.duration_millis)})"
                    )
                    if step.error_message:
                        lines.append(f"      error: {step.error_message}")
        if omitted:
            lines.append(truncation_notice(omitted, len(shown)))

    lines.append("")
    return Document(content="\n".join(lines), media_type="text/plain")
