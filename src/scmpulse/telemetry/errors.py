"""Telemetry sink exceptions.

These exceptions are for sink errors only. The checkout listener catches
them; they never reach the build host.
"""


class TelemetrySinkError(Exception):
    """Raised when a sink cannot be configured or cannot deliver a payload.

    Attributes:
        sink_name: Name of the sink that failed
        message: Human-readable error description
    """

    def __init__(self, sink_name: str, message: str) -> None:
        self.sink_name = sink_name
        self.message = message
        super().__init__(f"Sink '{sink_name}' failed: {message}")
