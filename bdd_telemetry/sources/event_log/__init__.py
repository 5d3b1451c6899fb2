"""JSON-lines event log source module."""

from bdd_telemetry.sources.event_log.config import EventLogConfig
from bdd_telemetry.sources.event_log.manifest import event_log_manifest
from bdd_telemetry.sources.event_log.source import EventLogSource

__all__ = ["EventLogConfig", "EventLogSource", "event_log_manifest"]
