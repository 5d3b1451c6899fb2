"""Source manifest definition for the plugin system."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from bdd_telemetry.sources.base import EventSource

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class SourceManifest(Generic[ConfigT]):
    """Manifest describing an event source plugin.

    The manifest contains references to the configuration class and the
    source factory function for lazy loading of sources based on their key.
    """

    config_cls: type[ConfigT]
    source_factory: Callable[[ConfigT], EventSource]
