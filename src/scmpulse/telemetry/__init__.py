"""Telemetry sinks for checkout events and counters.

Components:
- protocols: TelemetrySinkProtocol for implementing sinks
- hookspecs: pluggy hooks for sink discovery
- factory: create_sink() from SinkSettings
- errors: TelemetrySinkError for configuration and delivery failures
- sinks: Built-in sinks (datadog, dogstatsd, console)

Usage:
    from scmpulse.telemetry import create_sink, TelemetrySinkProtocol
"""

from scmpulse.telemetry.errors import TelemetrySinkError
from scmpulse.telemetry.factory import create_sink, discover_sinks
from scmpulse.telemetry.protocols import TelemetrySinkProtocol
from scmpulse.telemetry.sinks import ConsoleSink, DatadogSink, DogStatsDSink

__all__ = [
    "ConsoleSink",
    "DatadogSink",
    "DogStatsDSink",
    "TelemetrySinkError",
    "TelemetrySinkProtocol",
    "create_sink",
    "discover_sinks",
]
