"""Event log source manifest."""

from bdd_telemetry.sources.event_log.config import EventLogConfig
from bdd_telemetry.sources.event_log.source import EventLogSource
from bdd_telemetry.sources.manifest import SourceManifest

event_log_manifest = SourceManifest(
    config_cls=EventLogConfig,
    source_factory=EventLogSource.from_config,
)
