"""End-to-end tests generating dashboards from recorded runs."""

import json
import os
import random
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from bdd_telemetry.builder import ResultTreeBuilder
from bdd_telemetry.metrics import compute_metrics
from bdd_telemetry.models.config import PRESETS
from bdd_telemetry.models.events import Event
from bdd_telemetry.publisher import ReportPublisher
from bdd_telemetry.summary import RunMetadata, RunSummary, load_summary

from .conftest import WriteEventLogFn


class TestLiveRun:
    """Tests feeding a builder from concurrent workers while snapshotting."""

    async def test_concurrent_run_publishes_consistent_artifacts(
        self, tmp_path: Path, run_events: list[Event]
    ) -> None:
        """Artifacts published after a concurrent run match the sequential tree."""
        sequential = ResultTreeBuilder()
        sequential.ingest_many(run_events)
        expected = compute_metrics(sequential.snapshot())

        builder = ResultTreeBuilder()
        shuffled = list(run_events)
        random.Random(7).shuffle(shuffled)
        workers = [shuffled[index::4] for index in range(4)]

        def work(events: list[Event]) -> None:
            for event in events:
                builder.ingest(event)
                builder.snapshot()

        with ThreadPoolExecutor(max_workers=4) as executor:
            list(executor.map(work, workers))

        tree = builder.snapshot()
        metrics = compute_metrics(tree)
        summary = RunSummary(
            metadata=RunMetadata.from_environ({}, source="live"),
            tree=tree,
            metrics=metrics,
        )
        configs = PRESETS["ci"].dashboard_configs()

        results = await ReportPublisher(output_dir=tmp_path).publish(
            summary, configs, ("html", "text")
        )

        assert all(result.status == "written" for result in results)
        assert metrics.scenarios == expected.scenarios
        assert metrics.steps == expected.steps
        assert metrics.pass_rate == 50.0
        assert load_summary(tmp_path / "summary.json") == summary


class TestGenerateDashboardCommand:
    """Tests running the installed command line entry point."""

    def _run(self, cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
        return subprocess.run(
            [sys.executable, "-m", "bdd_telemetry.cli", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            env={**os.environ, "BUILD_ID": "build-99"},
            check=False,
        )

    def test_event_log_to_dashboards(
        self,
        tmp_path: Path,
        run_events: list[Event],
        write_event_log: WriteEventLogFn,
    ) -> None:
        """Generates every artifact from an event log and reports bad lines."""
        log_path = write_event_log(run_events, extra_lines=['{"kind": "Unknown"}'])

        result = self._run(
            tmp_path,
            "--source",
            "event-log",
            "--input",
            str(log_path),
            "--output",
            str(tmp_path / "reports"),
            "--theme",
            "both",
        )

        assert result.returncode == 0, result.stderr
        output = json.loads(result.stdout)
        assert output["features"]["total"] == 2
        assert output["scenarios"] == {
            "total": 4,
            "passed": 2,
            "failed": 1,
            "skipped": 1,
            "pending": 0,
        }
        assert "Rejected event" in result.stderr

        reports = tmp_path / "reports"
        summary = load_summary(reports / "summary.json")
        assert summary.metadata.build_id == "build-99"
        assert summary.metadata.source == "event-log"
        dark = (reports / "dashboard-dark.html").read_text(encoding="utf-8")
        light = (reports / "dashboard.html").read_text(encoding="utf-8")
        assert 'data-feature-id="checkout"' in dark
        assert light.split("</style>", 1)[1] == dark.split("</style>", 1)[1]

    def test_fail_on_failures(
        self,
        tmp_path: Path,
        run_events: list[Event],
        write_event_log: WriteEventLogFn,
    ) -> None:
        """Failed scenarios fail the command when requested."""
        log_path = write_event_log(run_events)

        result = self._run(
            tmp_path,
            "--source",
            "event-log",
            "--input",
            str(log_path),
            "--output",
            str(tmp_path / "reports"),
            "--fail-on-failures",
        )

        assert result.returncode == 1
        assert (tmp_path / "reports" / "dashboard.html").exists()

    @pytest.mark.parametrize("source", ["event-log", "cucumber-json"])
    def test_missing_input(self, tmp_path: Path, source: str) -> None:
        """A missing input file exits with 1 without writing artifacts."""
        result = self._run(
            tmp_path,
            "--source",
            source,
            "--input",
            str(tmp_path / "missing"),
            "--output",
            str(tmp_path / "reports"),
        )

        assert result.returncode == 1
        assert "not found" in result.stderr
        assert not (tmp_path / "reports").exists()
