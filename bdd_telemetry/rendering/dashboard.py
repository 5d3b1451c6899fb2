"""Interactive HTML dashboard renderer.

The document is a single self-contained HTML file:

- a metrics header (feature, scenario and step counts, pass rate);
- an optional performance section (step duration statistics, slowest
  nodes, per-service breakdown);
- search and status filter controls;
- one collapsible section per feature, with scenarios and, optionally,
  their steps.

Output depends only on the tree, the metrics and the config, so two renders
of the same inputs are byte-identical. Themes only swap the stylesheet
tokens; the markup after ``</style>`` is the same for every theme.
"""

import html
from collections.abc import Mapping
from dataclasses import dataclass
from string import Template

from bdd_telemetry.errors import RenderError
from bdd_telemetry.models.config import DashboardConfig
from bdd_telemetry.models.metrics import DurationStats, Metrics, StatusCounts
from bdd_telemetry.models.tree import FeatureResult, ResultTree, ScenarioResult
from bdd_telemetry.rendering.document import (
    Document,
    format_duration,
    truncate_features,
    truncation_notice,
)

EMPTY_MESSAGE = "No test results found"


@dataclass(frozen=True, kw_only=True)
class Palette:
    """Presentation tokens for one theme."""

    background: str
    surface: str
    text: str
    muted: str
    border: str
    hover: str
    step_background: str
    error_background: str
    error_text: str
    spacing: str


THEMES: Mapping[str, Palette] = {
    "light": Palette(
        background="#f5f5f5",
        surface="#ffffff",
        text="#333333",
        muted="#666666",
        border="#e5e5e5",
        hover="#f8f9fa",
        step_background="#fafafa",
        error_background="#fee2e2",
        error_text="#991b1b",
        spacing="20px",
    ),
    "dark": Palette(
        background="#1a1a1a",
        surface="#2d2d2d",
        text="#ffffff",
        muted="#cccccc",
        border="#404040",
        hover="#505050",
        step_background="#1f2937",
        error_background="#dc2626",
        error_text="#ffffff",
        spacing="16px",
    ),
}

_STYLE = Template("""\
* { margin: 0; padding: 0; box-sizing: border-box; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    background: $background;
    color: $text;
    line-height: 1.6;
}
.container { max-width: 1400px; margin: 0 auto; padding: $spacing; }
.header, .metric-card, .performance, .features {
    background: $surface;
    border-radius: 12px;
    padding: $spacing;
    margin-bottom: $spacing;
    box-shadow: 0 4px 6px rgba(0, 0, 0, 0.1);
}
.header p, .metric-label, .feature-summary, .step-duration { color: $muted; }
.metrics-grid {
    display: grid;
    grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
    gap: $spacing;
}
.metric-value { font-size: 2rem; font-weight: 700; }
.success { color: #10b981; }
.error { color: #ef4444; }
.warning { color: #f59e0b; }
.info { color: #3b82f6; }
table { width: 100%; border-collapse: collapse; }
th, td { text-align: left; padding: 6px; border-bottom: 1px solid $border; }
.feature { border: 1px solid $border; border-radius: 8px; margin-bottom: $spacing; }
.feature-header { padding: $spacing; cursor: pointer; }
.feature-header:hover, .scenario-header:hover { background: $hover; }
.scenarios, .steps { display: none; padding: $spacing; }
.scenario { border: 1px solid $border; border-radius: 6px; margin-bottom: 10px; }
.scenario-header {
    padding: 10px;
    cursor: pointer;
    display: flex;
    justify-content: space-between;
}
.status { padding: 2px 10px; border-radius: 20px; font-size: 0.8rem; text-transform: uppercase; }
.status-passed { background: #dcfce7; color: #166534; }
.status-failed { background: #fee2e2; color: #991b1b; }
.status-skipped { background: #fef3c7; color: #92400e; }
.status-pending, .status-undefined { background: #e0e7ff; color: #3730a3; }
.step { background: $step_background; border-left: 4px solid $border; padding: 8px; margin-bottom: 6px; }
.step-error {
    background: $error_background;
    color: $error_text;
    font-family: 'Monaco', 'Menlo', monospace;
    white-space: pre-wrap;
    padding: 6px;
    margin-top: 6px;
}
.controls { display: flex; gap: 10px; margin-bottom: $spacing; flex-wrap: wrap; }
.search-input {
    flex: 1;
    padding: 10px;
    border: 1px solid $border;
    background: $surface;
    color: $text;
}
.filter-btn { padding: 8px 16px; border: 1px solid $border; background: $surface; color: $text; }
.filter-btn.active { background: #3b82f6; color: #ffffff; }
.empty, .truncation-notice { padding: $spacing; color: $muted; font-style: italic; }
""")

_SCRIPT = """\
function toggle(id) {
    var element = document.getElementById(id);
    element.style.display = element.style.display === 'block' ? 'none' : 'block';
}
document.getElementById('search').addEventListener('input', function (event) {
    var term = event.target.value.toLowerCase();
    document.querySelectorAll('.feature').forEach(function (feature) {
        feature.style.display = feature.textContent.toLowerCase().includes(term) ? '' : 'none';
    });
});
document.querySelectorAll('.filter-btn').forEach(function (button) {
    button.addEventListener('click', function () {
        document.querySelectorAll('.filter-btn').forEach(function (other) {
            other.classList.remove('active');
        });
        button.classList.add('active');
        var filter = button.dataset.filter;
        document.querySelectorAll('.scenario').forEach(function (scenario) {
            var visible = filter === 'all' || scenario.dataset.status === filter;
            scenario.style.display = visible ? '' : 'none';
        });
    });
});
"""

_FILTERS = ("all", "passed", "failed", "skipped", "pending")


def _escape(text: str) -> str:
    return html.escape(text, quote=True)


def _rate_class(rate: float) -> str:
    if rate >= 80:
        return "success"
    if rate >= 60:
        return "warning"
    return "error"


def _metric_card(value: str, label: str, css_class: str) -> str:
    return (
        f'<div class="metric-card"><div class="metric-value {css_class}">{value}</div>'
        f'<div class="metric-label">{_escape(label)}</div></div>'
    )


def _counts_summary(counts: StatusCounts) -> str:
    return (
        f"{counts.total} total, {counts.passed} passed, {counts.failed} failed, "
        f"{counts.skipped} skipped, {counts.pending + counts.undefined} pending"
    )


def _render_metrics(metrics: Metrics) -> str:
    cards = [
        _metric_card(str(metrics.features.total), "Features", "info"),
        _metric_card(str(metrics.scenarios.total), "Scenarios", "info"),
        _metric_card(str(metrics.steps.total), "Steps", "info"),
        _metric_card(str(metrics.scenarios.passed), "Passed", "success"),
        _metric_card(str(metrics.scenarios.failed), "Failed", "error"),
        _metric_card(str(metrics.scenarios.skipped), "Skipped", "warning"),
        _metric_card(
            f"{metrics.pass_rate:.1f}%", "Pass Rate", _rate_class(metrics.pass_rate)
        ),
    ]
    return (
        '<div class="metrics-grid" id="metrics">'
        + "".join(cards)
        + "</div>"
        + f'<p class="feature-summary">Steps: {_counts_summary(metrics.steps)}</p>'
    )


def _stats_row(label: str, stats: DurationStats) -> str:
    cells = "".join(
        f"<td>{format_duration(value)}</td>"
        for value in (stats.min, stats.max, stats.mean, stats.p50, stats.p95)
    )
    return f"<tr><td>{_escape(label)}</td><td>{stats.count}</td>{cells}</tr>"


def _render_performance(metrics: Metrics) -> str:
    header = (
        "<tr><th>Scope</th><th>Measured</th><th>Min</th><th>Max</th>"
        "<th>Mean</th><th>p50</th><th>p95</th></tr>"
    )
    rows = [_stats_row("All steps", metrics.step_durations)]
    rows.extend(
        _stats_row(f"Service: {service.service}", service.durations)
        for service in metrics.services
    )
    slowest = "".join(
        f"<li>{label}: {_escape(value or 'N/A')}</li>"
        for label, value in (
            ("Slowest feature", metrics.slowest_feature),
            ("Slowest scenario", metrics.slowest_scenario),
            ("Slowest step", metrics.slowest_step),
        )
    )
    return (
        '<section class="performance" id="performance">'
        "<h2>Performance Analysis</h2>"
        f"<p>Average scenario duration: "
        f"{format_duration(metrics.average_scenario_millis)}</p>"
        f"<ul>{slowest}</ul>"
        f"<table>{header}{''.join(rows)}</table>"
        "</section>"
    )


def _render_scenario(
    scenario: ScenarioResult,
    element_id: str,
    include_step_details: bool,
) -> str:
    parts = [
        f'<div class="scenario" data-status="{scenario.status}">',
        f"<div class=\"scenario-header\" onclick=\"toggle('{element_id}')\">",
        f'<span class="scenario-title">{_escape(scenario.name)}</span>',
        f'<span class="status status-{scenario.status}">{scenario.status}</span>',
        "</div>",
    ]
    if scenario.error_message and not include_step_details:
        parts.append(f'<div class="step-error">{_escape(scenario.error_message)}</div>')

    if include_step_details:
        parts.append(f'<div class="steps" id="{element_id}">')
        if scenario.error_message:
            parts.append(
                f'<div class="step-error">{_escape(scenario.error_message)}</div>'
            )
        for step in scenario.steps:
            parts.append(
                f'<div class="step step-{step.status}" data-status="{step.status}">'
                f'<div class="step-name">{_escape(step.name)}</div>'
                f'<div class="step-duration">{step.status} in '
                f"{format_duration(step.duration_millis)}</div>"
            )
            if step.error_message:
                parts.append(
                    f'<div class="step-error">{_escape(step.error_message)}</div>'
                )
            parts.append("</div>")
        parts.append("</div>")

    parts.append("</div>")
    return "".join(parts)


def _render_feature(
    feature: FeatureResult, position: int, include_step_details: bool
) -> str:
    counts = StatusCounts.from_statuses(s.status for s in feature.scenarios)
    scenarios = "".join(
        _render_scenario(scenario, f"steps-{position}-{index}", include_step_details)
        for index, scenario in enumerate(feature.scenarios)
    )
    return (
        f'<section class="feature" data-feature-id="{_escape(feature.feature_id)}" '
        f'data-status="{feature.status}">'
        f"<div class=\"feature-header\" onclick=\"toggle('scenarios-{position}')\">"
        f'<h3 class="feature-title">{_escape(feature.name)} '
        f'<span class="status status-{feature.status}">{feature.status}</span></h3>'
        f'<div class="feature-summary">{counts.total} scenarios, '
        f"{counts.passed} passed, {counts.failed} failed, {counts.skipped} skipped</div>"
        "</div>"
        f'<div class="scenarios" id="scenarios-{position}">{scenarios}</div>'
        "</section>"
    )


def _render_features(tree: ResultTree, config: DashboardConfig) -> str:
    if tree.is_empty:
        return f'<div class="features"><p class="empty">{EMPTY_MESSAGE}</p></div>'

    shown, omitted = truncate_features(tree.features, config.max_features_to_show)
    parts = ['<div class="features">']
    parts.extend(
        _render_feature(feature, position, config.include_step_details)
        for position, feature in enumerate(shown)
    )
    if omitted:
        parts.append(
            f'<p class="truncation-notice">{truncation_notice(omitted, len(shown))}</p>'
        )
    parts.append("</div>")
    return "".join(parts)


def _render_controls() -> str:
    buttons = "".join(
        f'<button class="filter-btn{" active" if value == "all" else ""}" '
        f'data-filter="{value}">{value.capitalize()}</button>'
        for value in _FILTERS
    )
    return (
        '<div class="controls">'
        '<input type="text" class="search-input" id="search" '
        'placeholder="Search features, scenarios, or steps...">'
        f"{buttons}</div>"
    )


def render_dashboard(
    tree: ResultTree, metrics: Metrics, config: DashboardConfig
) -> Document:
    """Render the tree and metrics into a themed HTML dashboard.

    Raises:
        RenderError: If the configured theme has no palette.

    """
    try:
        palette = THEMES[config.theme]
    except KeyError as exc:
        raise RenderError(f"Unknown dashboard theme: {config.theme!r}") from exc

    script = _SCRIPT
    if config.auto_refresh:
        script += (
            "setTimeout(function () { window.location.reload(); }, "
            f"{config.refresh_interval_millis});\n"
        )

    body = [
        '<div class="container">',
        '<header class="header"><h1>Test Execution Dashboard</h1>'
        "<p>Feature, scenario and step results with performance metrics</p></header>",
        _render_metrics(metrics),
    ]
    if config.include_performance_metrics:
        body.append(_render_performance(metrics))
    body.append(_render_controls())
    body.append(_render_features(tree, config))
    body.append("</div>")

    content = "\n".join(
        [
            "<!DOCTYPE html>",
            f'<html lang="en" data-theme="{config.theme}">',
            "<head>",
            '<meta charset="UTF-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
            "<title>Test Execution Dashboard</title>",
            f"<style>\n{_STYLE.substitute(vars(palette))}</style>",
            "</head>",
            "<body>",
            "\n".join(body),
            f"<script>\n{script}</script>",
            "</body>",
            "</html>",
            "",
        ]
    )
    return Document(content=content, media_type="text/html", theme=config.theme)
