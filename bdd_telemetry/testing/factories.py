"""Test factories for generating test data."""

from polyfactory.factories import DataclassFactory
from polyfactory.factories.pydantic_factory import ModelFactory

from bdd_telemetry.models.config import DashboardConfig
from bdd_telemetry.models.tree import FeatureResult, ScenarioResult, StepResult


class StepResultFactory(DataclassFactory[StepResult]):
    """Factory for StepResult."""

    __model__ = StepResult

    status = "passed"
    service = None
    started_at = None
    finished_at = None
    error_message = None


class ScenarioResultFactory(DataclassFactory[ScenarioResult]):
    """Factory for ScenarioResult."""

    __model__ = ScenarioResult

    status = "passed"
    steps = ()
    started_at = None
    finished_at = None
    error_message = None


class FeatureResultFactory(DataclassFactory[FeatureResult]):
    """Factory for FeatureResult."""

    __model__ = FeatureResult

    status = "passed"
    scenarios = ()
    started_at = None
    finished_at = None
    error_message = None


class DashboardConfigFactory(ModelFactory[DashboardConfig]):
    """Factory for DashboardConfig."""

    __model__ = DashboardConfig

    theme = "light"
    include_performance_metrics = True
    include_step_details = True
    max_features_to_show = 50
    auto_refresh = False
    refresh_interval_millis = 5000
