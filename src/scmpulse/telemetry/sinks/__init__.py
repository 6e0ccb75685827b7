"""Built-in telemetry sinks.

Available sinks:
- DatadogSink: Datadog HTTP API (events + series)
- DogStatsDSink: Local Datadog agent over UDP
- ConsoleSink: stdout/stderr for debugging and dry runs

Plugin registration:
    Sinks are registered via the scmpulse_get_sinks hook.
    BuiltinSinksPlugin in this module registers all built-in sinks.
"""

from scmpulse.telemetry.hookspecs import hookimpl
from scmpulse.telemetry.sinks.console import ConsoleSink
from scmpulse.telemetry.sinks.datadog import DatadogSink
from scmpulse.telemetry.sinks.dogstatsd import DogStatsDSink


class BuiltinSinksPlugin:
    """Plugin that registers built-in telemetry sinks."""

    @hookimpl
    def scmpulse_get_sinks(self) -> list[type]:
        """Return built-in sink classes."""
        return [ConsoleSink, DatadogSink, DogStatsDSink]


__all__ = [
    "BuiltinSinksPlugin",
    "ConsoleSink",
    "DatadogSink",
    "DogStatsDSink",
]
