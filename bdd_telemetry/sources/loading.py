"""Loading of event sources from entry points."""

from importlib.metadata import EntryPoint, entry_points
from typing import Any

from bdd_telemetry.sources.manifest import SourceManifest

ENTRY_POINT_GROUP = "bdd_telemetry.sources"


class SourceNotFoundError(Exception):
    """Raised when a source is not found or does not provide a manifest."""


def _registered_sources() -> dict[str, EntryPoint]:
    return {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}


def available_sources() -> list[str]:
    """Keys of every installed source, sorted."""
    return sorted(_registered_sources())


def load_source_manifest(key: str) -> SourceManifest[Any]:
    """Load a source manifest by key.

    Args:
        key: The source key as registered in pyproject.toml
             (e.g., "cucumber-json", "event-log")

    Returns:
        The source manifest instance

    Raises:
        SourceNotFoundError: If no source is registered under the key, or
            the registered object is not a ``SourceManifest``

    """
    registered = _registered_sources()
    if (entry := registered.get(key)) is None:
        raise SourceNotFoundError(
            f"Source '{key}' not found. Available sources: {sorted(registered)}"
        )

    manifest = entry.load()
    if not isinstance(manifest, SourceManifest):
        raise SourceNotFoundError(
            f"Source '{key}' ({entry.value}) does not provide a source manifest"
        )
    return manifest
