"""Configuration models for dashboards and reporting runs."""

from collections.abc import Sequence
from pathlib import Path
from typing import Literal, TypeAlias

from pydantic import Field

from bdd_telemetry.models.base import Model

Theme: TypeAlias = Literal["light", "dark"]
ReportFormat: TypeAlias = Literal["html", "text"]


class DashboardConfig(Model):
    """Rendering options for a single dashboard document.

    Options only change how a tree is presented, never the tree or metrics.
    """

    theme: Theme = "light"
    include_performance_metrics: bool = True
    include_step_details: bool = True
    max_features_to_show: int = Field(default=50, ge=0)
    auto_refresh: bool = False
    refresh_interval_millis: int = Field(default=5000, gt=0)


class ReportingConfig(Model):
    """Where reports are read from and written to, and in which shapes."""

    base_dir: Path = Path("./test-reports")
    input_path: Path = Path("./coverage/functional-tests/cucumber-report.json")
    themes: Sequence[Theme] = Field(default=("light", "dark"), min_length=1)
    formats: Sequence[ReportFormat] = Field(default=("html",), min_length=1)
    dashboard: DashboardConfig = DashboardConfig()

    def dashboard_configs(
        self, themes: Sequence[Theme] | None = None
    ) -> Sequence[DashboardConfig]:
        """Resolve one dashboard configuration per theme, in order."""
        selected = themes if themes is not None else self.themes
        return [
            self.dashboard.model_copy(update={"theme": theme})
            for theme in dict.fromkeys(selected)
        ]


PRESETS: dict[str, ReportingConfig] = {
    "ci": ReportingConfig(
        base_dir=Path("./ci-reports"),
        dashboard=DashboardConfig(
            include_step_details=False,
            max_features_to_show=200,
        ),
    ),
    "dev": ReportingConfig(
        base_dir=Path("./dev-reports"),
        themes=("light",),
        dashboard=DashboardConfig(
            max_features_to_show=100,
            auto_refresh=True,
            refresh_interval_millis=3000,
        ),
    ),
}
