"""Cucumber JSON source manifest."""

from bdd_telemetry.sources.cucumber_json.config import CucumberJsonConfig
from bdd_telemetry.sources.cucumber_json.source import CucumberJsonSource
from bdd_telemetry.sources.manifest import SourceManifest

cucumber_json_manifest = SourceManifest(
    config_cls=CucumberJsonConfig,
    source_factory=CucumberJsonSource.from_config,
)
