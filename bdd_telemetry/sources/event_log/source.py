"""Event source replaying a JSON-lines event log."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from bdd_telemetry.sources.base import EventSource, read_source_text
from bdd_telemetry.sources.event_log.config import EventLogConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class EventLogSource(EventSource):
    """Replays a JSON-lines file holding one lifecycle event per line.

    Lines are yielded unparsed; blank lines are skipped.
    """

    config: EventLogConfig

    @classmethod
    def from_config(cls, config: EventLogConfig) -> "EventLogSource":
        """Create source from configuration."""
        return cls(config=config)

    def events(self) -> Iterator[str]:
        text = read_source_text(self.config.path)
        lines = [line.strip() for line in text.splitlines()]
        records = [line for line in lines if line]
        log.info("Replaying %d event(s) from %s", len(records), self.config.path)
        yield from records
