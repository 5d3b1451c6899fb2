"""Tests for the plain-text renderer."""

from bdd_telemetry.metrics import compute_metrics
from bdd_telemetry.models.tree import ResultTree
from bdd_telemetry.rendering.dashboard import EMPTY_MESSAGE
from bdd_telemetry.rendering.text import render_text
from bdd_telemetry.testing.factories import (
    DashboardConfigFactory,
    FeatureResultFactory,
    ScenarioResultFactory,
    StepResultFactory,
)


def _tree(feature_count: int = 1) -> ResultTree:
    return ResultTree(
        features=tuple(
            FeatureResultFactory.build(
                name=f"Feature {index}",
                status="passed",
                scenarios=(
                    ScenarioResultFactory.build(
                        name="Scenario",
                        steps=(
                            StepResultFactory.build(
                                name="Given a queue", duration_millis=1500.0
                            ),
                        ),
                    ),
                ),
            )
            for index in range(feature_count)
        )
    )


def test_render_text_lists_results() -> None:
    """Lists features, scenarios and steps with durations."""
    tree = _tree()
    document = render_text(tree, compute_metrics(tree), DashboardConfigFactory.build())

    assert document.media_type == "text/plain"
    assert "[PASSED] Feature 0" in document.content
    assert "  [PASSED] Scenario" in document.content
    assert "    [passed] Given a queue (1.5s)" in document.content
    assert "Pass rate: 100.0%" in document.content
    assert "Performance" in document.content


def test_render_text_follows_dashboard_options() -> None:
    """Step details, performance and truncation follow the configuration."""
    tree = _tree(5)
    config = DashboardConfigFactory.build(
        include_step_details=False,
        include_performance_metrics=False,
        max_features_to_show=2,
    )

    content = render_text(tree, compute_metrics(tree), config).content

    assert "Given a queue" not in content
    assert "Performance" not in content
    assert "Feature 1" in content
    assert "Feature 2" not in content
    assert "3 more not shown (showing 2 of 5 features)" in content


def test_render_text_empty_tree() -> None:
    """An empty run renders the no-results message."""
    tree = ResultTree()
    document = render_text(tree, compute_metrics(tree), DashboardConfigFactory.build())
    content = document.content

    assert EMPTY_MESSAGE in content
    assert "Features: 0" in content
