"""Machine-readable run summary (metadata, full tree and metrics)."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from bdd_telemetry.errors import ReportSourceError, ReportSourceMissingError
from bdd_telemetry.models.events import describe_errors
from bdd_telemetry.models.metrics import Metrics
from bdd_telemetry.models.tree import ResultTree
from bdd_telemetry.rendering.document import Document


def _first(environ: Mapping[str, str], *names: str) -> str | None:
    for name in names:
        if value := environ.get(name):
            return value
    return None


@dataclass(frozen=True, kw_only=True)
class RunMetadata:
    """Where and when a run was reported."""

    generated_at: datetime
    environment: str = "development"
    build_id: str | None = None
    branch: str | None = None
    commit_hash: str | None = None
    pull_request_number: int | None = None
    source: str | None = None

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        *,
        source: str | None = None,
        generated_at: datetime | None = None,
    ) -> "RunMetadata":
        """Collect CI metadata from environment variables."""
        pull_request = _first(environ, "PULL_REQUEST_NUMBER")
        return cls(
            generated_at=generated_at or datetime.now(timezone.utc),
            environment=_first(environ, "BDD_TELEMETRY_ENV", "CI_ENVIRONMENT")
            or "development",
            build_id=_first(environ, "BUILD_ID", "GITHUB_RUN_ID"),
            branch=_first(environ, "BRANCH_NAME", "GITHUB_REF_NAME"),
            commit_hash=_first(environ, "COMMIT_SHA", "GITHUB_SHA"),
            pull_request_number=(
                int(pull_request) if pull_request and pull_request.isdigit() else None
            ),
            source=source,
        )


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Everything a downstream consumer needs to rebuild the dashboards."""

    metadata: RunMetadata
    tree: ResultTree
    metrics: Metrics


_summary_adapter: TypeAdapter[RunSummary] = TypeAdapter(RunSummary)


def render_summary(summary: RunSummary) -> Document:
    """Serialise a summary into a JSON document."""
    content = _summary_adapter.dump_json(summary, indent=2).decode()
    return Document(content=content + "\n", media_type="application/json")


def parse_summary(content: str | bytes) -> RunSummary:
    """Parse a JSON summary produced by ``render_summary``.

    Raises:
        ReportSourceError: If the content is not a valid summary.

    """
    try:
        return _summary_adapter.validate_json(content)
    except ValidationError as exc:
        raise ReportSourceError(f"Invalid run summary: {describe_errors(exc)}") from exc


def load_summary(path: Path) -> RunSummary:
    """Read a summary artifact from disk."""
    if not path.exists():
        raise ReportSourceMissingError(f"Summary not found: {path}")
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise ReportSourceError(f"Cannot read summary {path}: {exc}") from exc
    return parse_summary(content)
