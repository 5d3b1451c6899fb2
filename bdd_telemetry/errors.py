"""Error taxonomy for the telemetry and reporting engine."""


class TelemetryError(Exception):
    """Base class for all engine errors."""


class MalformedEventError(TelemetryError):
    """Raised when an event is missing identity fields or carries bad values."""


class UnsupportedEventKindError(TelemetryError):
    """Raised when an event declares a kind the engine does not know."""


class ConflictingOutcomeError(TelemetryError):
    """Two terminal events reported different outcomes for the same node.

    Never raised by the builder: it is logged and the last outcome wins.
    """

    def __init__(self, node: str, previous: str, current: str) -> None:
        super().__init__(
            f"Conflicting outcome for {node}: {previous} replaced by {current}"
        )
        self.node = node
        self.previous = previous
        self.current = current


class RenderError(TelemetryError):
    """Raised when a document cannot be produced."""


class SinkWriteError(TelemetryError):
    """Raised when an artifact cannot be persisted."""


class ConfigurationError(TelemetryError):
    """Raised when a configuration file cannot be loaded or validated."""


class ReportSourceError(TelemetryError):
    """Raised when a report source cannot be read."""


class ReportSourceMissingError(ReportSourceError):
    """Raised when a report source file does not exist."""
