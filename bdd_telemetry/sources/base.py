"""Abstract base class for event sources."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from bdd_telemetry.errors import ReportSourceError, ReportSourceMissingError
from bdd_telemetry.models.events import RawEvent


@dataclass(frozen=True, kw_only=True)
class EventSource(ABC):
    """Replays a recorded test run as lifecycle events.

    Sources yield raw payloads or typed events; validation happens when the
    builder ingests them, so one bad record never hides the rest.
    """

    @abstractmethod
    def events(self) -> Iterator[RawEvent]:
        """Yield the run's events in recorded order.

        Raises:
            ReportSourceMissingError: If the recording does not exist
            ReportSourceError: If the recording cannot be read

        """


def read_source_text(path: Path) -> str:
    """Read a recorded report, distinguishing missing from unreadable files."""
    if not path.exists():
        raise ReportSourceMissingError(f"Report source not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ReportSourceError(f"Cannot read report source {path}: {exc}") from exc
