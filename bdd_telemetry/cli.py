"""CLI entry point generating test dashboards from a recorded run."""

import argparse
import asyncio
import json
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bdd_telemetry.builder import ResultTreeBuilder
from bdd_telemetry.config_loader import load_reporting_config
from bdd_telemetry.errors import ConfigurationError, ReportSourceError
from bdd_telemetry.metrics import compute_metrics
from bdd_telemetry.models.config import PRESETS, Theme
from bdd_telemetry.models.events import describe_errors
from bdd_telemetry.models.metrics import Metrics, StatusCounts
from bdd_telemetry.models.tree import ResultTree
from bdd_telemetry.publisher import ArtifactResult, ReportPublisher
from bdd_telemetry.sources.loading import SourceNotFoundError, load_source_manifest
from bdd_telemetry.summary import RunMetadata, RunSummary

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "skipped": "⏭️",
    "pending": "⏳",
    "undefined": "❔",
}

THEME_CHOICES: dict[str, Sequence[Theme]] = {
    "light": ("light",),
    "dark": ("dark",),
    "both": ("light", "dark"),
}


def log_results_summary(
    log: logging.Logger,
    tree: ResultTree,
    metrics: Metrics,
    artifacts: Sequence[ArtifactResult],
) -> None:
    """Log a formatted summary of feature results and written artifacts."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for feature in tree.features:
        symbol = STATUS_SYMBOLS.get(feature.status, "?")
        log.info(
            "%s %s: %s (%d scenario(s))",
            symbol,
            feature.name,
            feature.status,
            len(feature.scenarios),
        )
        for scenario in feature.scenarios:
            if scenario.status == "failed" and scenario.error_message:
                log.info("  %s: %s", scenario.name, scenario.error_message)

    log.info(
        "Scenarios: %d passed, %d failed, %d skipped (pass rate %.1f%%)",
        metrics.scenarios.passed,
        metrics.scenarios.failed,
        metrics.scenarios.skipped,
        metrics.pass_rate,
    )
    for artifact in artifacts:
        if artifact.status == "written":
            log.info("  Artifact: %s", artifact.path)
        else:
            log.info("  Artifact failed: %s (%s)", artifact.path, artifact.message)


def _counts(counts: StatusCounts) -> dict[str, int]:
    return {
        "total": counts.total,
        "passed": counts.passed,
        "failed": counts.failed,
        "skipped": counts.skipped,
        "pending": counts.pending + counts.undefined,
    }


def format_output(
    metrics: Metrics, artifacts: Sequence[ArtifactResult]
) -> dict[str, Any]:
    """Format run counts and artifact outcomes for JSON output."""
    return {
        "features": _counts(metrics.features),
        "scenarios": _counts(metrics.scenarios),
        "steps": _counts(metrics.steps),
        "pass_rate": metrics.pass_rate,
        "artifacts": [
            {
                "kind": artifact.kind,
                "theme": artifact.theme,
                "status": artifact.status,
                "path": str(artifact.path),
                "message": artifact.message,
            }
            for artifact in artifacts
        ],
    }


async def run(
    source_key: str,
    source_config_json: str = "{}",
    input_path: Path | None = None,
    output_dir: Path | None = None,
    config_path: Path | None = None,
    preset: str | None = None,
    themes: Sequence[Theme] | None = None,
    fail_on_failures: bool = False,
) -> int:
    """Generate the report artifacts of a recorded run and return exit code."""
    log = logging.getLogger("bdd_telemetry")

    try:
        reporting = load_reporting_config(config_path, preset=preset)
    except ConfigurationError as exc:
        log.error("%s", exc)
        return 1

    log.info("Loading source: %s", source_key)
    try:
        manifest = load_source_manifest(source_key)
    except SourceNotFoundError as exc:
        log.error("%s", exc)
        return 1

    try:
        config_dict = {
            "path": input_path or reporting.input_path,
            **json.loads(source_config_json),
        }
        config = manifest.config_cls(**config_dict)
    except json.JSONDecodeError as exc:
        log.error("Invalid source configuration JSON: %s", exc)
        return 1
    except ValidationError as exc:
        log.error("Invalid source configuration: %s", describe_errors(exc))
        return 1

    source = manifest.source_factory(config)
    builder = ResultTreeBuilder()
    try:
        report = builder.ingest_many(source.events())
    except ReportSourceError as exc:
        log.error("%s", exc)
        return 1

    if report.accepted == 0:
        log.warning("No test events found in %s", config_dict["path"])
    if report.rejected:
        log.warning("Rejected %d malformed event(s)", report.rejected)

    tree = builder.snapshot()
    metrics = compute_metrics(tree)
    summary = RunSummary(
        metadata=RunMetadata.from_environ(os.environ, source=source_key),
        tree=tree,
        metrics=metrics,
    )

    publisher = ReportPublisher(output_dir=output_dir or reporting.base_dir)
    artifacts = await publisher.publish(
        summary, reporting.dashboard_configs(themes), reporting.formats
    )

    log_results_summary(log, tree, metrics, artifacts)

    output = format_output(metrics, artifacts)
    print(json.dumps(output, indent=2))

    if any(artifact.status == "error" for artifact in artifacts):
        return 1
    if fail_on_failures and metrics.scenarios.failed:
        return 1
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Generate test execution dashboards from a recorded BDD run"
    )
    parser.add_argument(
        "--source",
        default="cucumber-json",
        help="Source key (cucumber-json, event-log)",
    )
    parser.add_argument(
        "--source-config",
        default="{}",
        help="JSON configuration for the source",
    )
    parser.add_argument(
        "--input",
        type=Path,
        help="Path to the recorded run (default: from configuration)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Directory receiving the artifacts (default: from configuration)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Reporting configuration file (default: searched upwards)",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Configuration preset to start from",
    )
    parser.add_argument(
        "--theme",
        choices=sorted(THEME_CHOICES),
        help="Dashboard theme(s) to render (default: from configuration)",
    )
    parser.add_argument(
        "--fail-on-failures",
        action="store_true",
        help="Exit with status 1 when any scenario failed",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            source_key=args.source,
            source_config_json=args.source_config,
            input_path=args.input,
            output_dir=args.output,
            config_path=args.config,
            preset=args.preset,
            themes=THEME_CHOICES[args.theme] if args.theme else None,
            fail_on_failures=args.fail_on_failures,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
