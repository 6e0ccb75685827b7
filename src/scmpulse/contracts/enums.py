"""Status codes, levels and kinds used across module boundaries."""

from enum import StrEnum


class BuildResult(StrEnum):
    """Result of a build run as reported by the host.

    At checkout time the host has usually not decided a result yet, so
    UNKNOWN is the common case rather than an error.
    """

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"
    UNKNOWN = "UNKNOWN"


class AlertType(StrEnum):
    """Alert level attached to a telemetry event."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class EventPriority(StrEnum):
    """Priority attached to a telemetry event."""

    LOW = "low"
    NORMAL = "normal"


class CollectionFailureReason(StrEnum):
    """Why build metadata could not be collected."""

    IO = "io"
    INTERRUPTED = "interrupted"
