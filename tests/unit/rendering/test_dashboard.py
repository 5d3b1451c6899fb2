"""Tests for the HTML dashboard renderer."""

import pytest

from bdd_telemetry.errors import RenderError
from bdd_telemetry.metrics import compute_metrics
from bdd_telemetry.models.config import DashboardConfig
from bdd_telemetry.models.tree import ResultTree
from bdd_telemetry.rendering.dashboard import EMPTY_MESSAGE, render_dashboard
from bdd_telemetry.testing.factories import (
    DashboardConfigFactory,
    FeatureResultFactory,
    ScenarioResultFactory,
    StepResultFactory,
)


def _tree(feature_count: int = 2) -> ResultTree:
    return ResultTree(
        features=tuple(
            FeatureResultFactory.build(
                feature_id=f"feature-{index}",
                name=f"Feature <{index}>",
                duration_millis=float(index),
                scenarios=(
                    ScenarioResultFactory.build(
                        scenario_id=f"scenario-{index}",
                        name=f"Scenario {index}",
                        status="failed",
                        duration_millis=1.0,
                        error_message="expected 200 & got 500",
                        steps=(
                            StepResultFactory.build(
                                index=0,
                                name="When the lambda is invoked",
                                status="failed",
                                service="lambda",
                                duration_millis=1.0,
                            ),
                        ),
                    ),
                ),
            )
            for index in range(feature_count)
        ),
        version=1,
    )


def _render(tree: ResultTree, **overrides: object) -> str:
    config = DashboardConfigFactory.build(**overrides)
    return render_dashboard(tree, compute_metrics(tree), config).content


def test_render_dashboard_is_html_document() -> None:
    """Renders a themed, self-contained HTML document."""
    tree = _tree()
    document = render_dashboard(
        tree, compute_metrics(tree), DashboardConfigFactory.build(theme="dark")
    )

    assert document.media_type == "text/html"
    assert document.theme == "dark"
    assert document.content.startswith("<!DOCTYPE html>")
    assert 'data-theme="dark"' in document.content
    assert "Feature &lt;0&gt;" in document.content
    assert "expected 200 &amp; got 500" in document.content


def test_render_dashboard_is_deterministic() -> None:
    """Rendering the same inputs twice yields identical bytes."""
    tree = _tree()

    assert _render(tree) == _render(tree)


def test_themes_share_markup() -> None:
    """Themes differ only in their stylesheet."""
    tree = _tree()
    light = _render(tree, theme="light")
    dark = _render(tree, theme="dark")

    assert light != dark
    assert light.split("</style>", 1)[1] == dark.split("</style>", 1)[1]


def test_truncates_features() -> None:
    """Shows at most the configured number of features with a notice."""
    html = _render(_tree(250), max_features_to_show=200)

    assert html.count("data-feature-id=") == 200
    assert "50 more not shown" in html
    assert 'data-feature-id="feature-199"' in html
    assert 'data-feature-id="feature-200"' not in html


def test_no_truncation_notice_when_all_fit() -> None:
    """No notice is rendered when every feature is shown."""
    html = _render(_tree(3), max_features_to_show=3)

    assert html.count("data-feature-id=") == 3
    assert "more not shown" not in html


def test_performance_section_optional() -> None:
    """The performance section follows the configuration."""
    tree = _tree()

    assert 'id="performance"' in _render(tree, include_performance_metrics=True)
    assert 'id="performance"' not in _render(tree, include_performance_metrics=False)


def test_step_details_optional() -> None:
    """Steps are omitted when step details are disabled."""
    tree = _tree()

    with_steps = _render(
        tree, include_step_details=True, include_performance_metrics=False
    )
    without_steps = _render(
        tree, include_step_details=False, include_performance_metrics=False
    )

    assert "When the lambda is invoked" in with_steps
    assert "When the lambda is invoked" not in without_steps
    assert "Scenario 0" in without_steps
    assert "expected 200 &amp; got 500" in without_steps


def test_auto_refresh() -> None:
    """Auto refresh reloads the page at the configured interval."""
    tree = _tree()

    assert "setTimeout" in _render(tree, auto_refresh=True, refresh_interval_millis=3000)
    assert "3000" in _render(tree, auto_refresh=True, refresh_interval_millis=3000)
    assert "setTimeout" not in _render(tree, auto_refresh=False)


def test_empty_tree_renders_no_results() -> None:
    """An empty run still renders a document with a no-results message."""
    tree = ResultTree()

    html = _render(tree)

    assert EMPTY_MESSAGE in html
    assert "data-feature-id=" not in html


def test_unknown_theme_raises_render_error() -> None:
    """Themes without a palette cannot be rendered."""
    tree = _tree()
    config = DashboardConfig.model_construct(theme="sepia")

    with pytest.raises(RenderError, match="sepia"):
        render_dashboard(tree, compute_metrics(tree), config)
