"""Cucumber JSON report source module."""

from bdd_telemetry.sources.cucumber_json.config import CucumberJsonConfig
from bdd_telemetry.sources.cucumber_json.manifest import cucumber_json_manifest
from bdd_telemetry.sources.cucumber_json.source import CucumberJsonSource

__all__ = ["CucumberJsonConfig", "CucumberJsonSource", "cucumber_json_manifest"]
