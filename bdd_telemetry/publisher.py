"""Publisher rendering and writing every report artifact of a run."""

import asyncio
import logging
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

from bdd_telemetry.models.config import DashboardConfig, ReportFormat, Theme
from bdd_telemetry.rendering.dashboard import render_dashboard
from bdd_telemetry.rendering.document import Document
from bdd_telemetry.rendering.text import render_text
from bdd_telemetry.sink import write_document
from bdd_telemetry.summary import RunSummary, render_summary

log = logging.getLogger(__name__)

ArtifactKind: TypeAlias = Literal["summary", "dashboard", "text"]

SUMMARY_FILENAME = "summary.json"
TEXT_FILENAME = "dashboard.txt"


def dashboard_filename(theme: Theme) -> str:
    """File name of the HTML dashboard for a theme."""
    return "dashboard.html" if theme == "light" else f"dashboard-{theme}.html"


@dataclass(frozen=True, kw_only=True)
class ArtifactResult:
    """Outcome of producing one artifact.

    ``path`` is where the artifact was (or would have been) written; it is
    the only signal upload and notification integrations consume.
    """

    kind: ArtifactKind
    status: Literal["written", "error"]
    path: Path
    theme: Theme | None = None
    message: str | None = None


@dataclass(frozen=True, kw_only=True)
class _ArtifactJob:
    kind: ArtifactKind
    path: Path
    render: Callable[[], Document]
    theme: Theme | None = None


@dataclass(frozen=True, kw_only=True)
class ReportPublisher:
    """Renders and writes the summary and dashboards of a run.

    Each artifact is produced in its own worker thread; a failure to render
    or write one artifact never prevents the others.
    """

    output_dir: Path

    async def publish(
        self,
        summary: RunSummary,
        configs: Sequence[DashboardConfig],
        formats: Collection[ReportFormat] = ("html",),
    ) -> Sequence[ArtifactResult]:
        """Produce all artifacts for a run summary.

        Args:
            summary: Snapshot, metrics and metadata of the run
            configs: One dashboard configuration per theme to render
            formats: Dashboard formats to produce (``html``, ``text``)

        Returns:
            One result per artifact, summary first

        """
        jobs = self._plan(summary, configs, formats)
        log.info("Publishing %d artifact(s) to %s", len(jobs), self.output_dir)

        results = await asyncio.gather(
            *(asyncio.to_thread(self._produce, job) for job in jobs),
            return_exceptions=True,
        )
        return self._process_results(jobs, results)

    def _plan(
        self,
        summary: RunSummary,
        configs: Sequence[DashboardConfig],
        formats: Collection[ReportFormat],
    ) -> Sequence[_ArtifactJob]:
        tree, metrics = summary.tree, summary.metrics
        jobs = [
            _ArtifactJob(
                kind="summary",
                path=self.output_dir / SUMMARY_FILENAME,
                render=lambda: render_summary(summary),
            )
        ]

        if "html" in formats:
            for config in configs:
                jobs.append(
                    _ArtifactJob(
                        kind="dashboard",
                        path=self.output_dir / dashboard_filename(config.theme),
                        theme=config.theme,
                        render=lambda config=config: render_dashboard(
                            tree, metrics, config
                        ),
                    )
                )

        if "text" in formats and configs:
            text_config = configs[0]
            jobs.append(
                _ArtifactJob(
                    kind="text",
                    path=self.output_dir / TEXT_FILENAME,
                    render=lambda: render_text(tree, metrics, text_config),
                )
            )
        return jobs

    @staticmethod
    def _produce(job: _ArtifactJob) -> Path:
        return write_document(job.render(), job.path)

    def _process_results(
        self,
        jobs: Sequence[_ArtifactJob],
        results: Sequence[Path | BaseException],
    ) -> Sequence[ArtifactResult]:
        """Turn per-artifact outcomes into results, isolating failures."""
        final_results: list[ArtifactResult] = []

        for job, result in zip(jobs, results, strict=True):
            if isinstance(result, Path):
                log.info("Artifact written: kind=%s path=%s", job.kind, result)
                final_results.append(
                    ArtifactResult(
                        kind=job.kind, status="written", path=result, theme=job.theme
                    )
                )
            elif isinstance(result, Exception):
                log.error(
                    "Artifact failed: kind=%s theme=%s path=%s: %s",
                    job.kind,
                    job.theme,
                    job.path,
                    result,
                    exc_info=result,
                )
                final_results.append(
                    ArtifactResult(
                        kind=job.kind,
                        status="error",
                        path=job.path,
                        theme=job.theme,
                        message=str(result),
                    )
                )
            else:
                raise result

        return final_results
