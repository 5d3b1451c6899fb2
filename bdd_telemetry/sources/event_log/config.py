"""Configuration for the JSON-lines event log source."""

from pathlib import Path

from pydantic import BaseModel


class EventLogConfig(BaseModel):
    """Configuration for the JSON-lines event log source."""

    path: Path
