"""Fixtures for integration tests."""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import pytest

from bdd_telemetry.models.events import Event
from bdd_telemetry.testing.events import event_payload, feature_events


class WriteEventLogFn(Protocol):
    """Protocol for event log creation function."""

    def __call__(
        self, events: Sequence[Event], *, extra_lines: Sequence[str] = ()
    ) -> Path:
        """Write events as JSON lines and return the log path."""


@pytest.fixture
def run_events() -> list[Event]:
    """Events of a run with two workers, one failed and one skipped scenario."""
    return [
        *feature_events(
            "checkout",
            {
                "pay by card": ("passed", "passed"),
                "pay by voucher": ("passed", "failed"),
            },
            worker_id="worker-1",
        ),
        *feature_events(
            "search",
            {"find product": ("passed",), "legacy filters": ("skipped", "skipped")},
            worker_id="worker-2",
        ),
    ]


@pytest.fixture
def write_event_log(tmp_path: Path) -> WriteEventLogFn:
    """Return a function writing an event log into the test directory."""

    def _write(events: Sequence[Event], *, extra_lines: Sequence[str] = ()) -> Path:
        path = tmp_path / "events.jsonl"
        lines = [json.dumps(event_payload(event)) for event in events]
        path.write_text("\n".join([*lines, *extra_lines]) + "\n", encoding="utf-8")
        return path

    return _write
