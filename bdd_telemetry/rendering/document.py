"""Rendered report documents and formatting helpers shared by renderers."""

from collections.abc import Sequence
from dataclasses import dataclass

from bdd_telemetry.models.config import Theme
from bdd_telemetry.models.tree import FeatureResult


@dataclass(frozen=True, kw_only=True)
class Document:
    """A rendered artifact ready to be written by the sink."""

    content: str
    media_type: str
    theme: Theme | None = None


def format_duration(millis: float | None) -> str:
    """Format milliseconds for display, ``n/a`` when unmeasured."""
    if millis is None:
        return "n/a"
    if millis < 1000:
        return f"{millis:.0f}ms"
    if millis < 60000:
        return f"{millis / 1000:.1f}s"
    minutes = int(millis // 60000)
    seconds = (millis % 60000) / 1000
    return f"{minutes}m {seconds:.0f}s"


def truncate_features(
    features: Sequence[FeatureResult], limit: int
) -> tuple[Sequence[FeatureResult], int]:
    """Split features into the shown prefix and the number omitted."""
    shown = features[:limit]
    return shown, len(features) - len(shown)


def truncation_notice(omitted: int, shown: int) -> str:
    return f"{omitted} more not shown (showing {shown} of {shown + omitted} features)"
