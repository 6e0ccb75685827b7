"""pluggy hook specifications for telemetry sinks.

Sink plugins implement these hooks to register themselves.

Usage (implementing a sink plugin):
    from scmpulse.telemetry.hookspecs import hookimpl

    class MySinkPlugin:
        @hookimpl
        def scmpulse_get_sinks(self):
            return [MySink]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from scmpulse.telemetry.protocols import TelemetrySinkProtocol

PROJECT_NAME = "scmpulse"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ScmPulseSinkSpec:
    """Hook specifications for telemetry sink plugins."""

    @hookspec
    def scmpulse_get_sinks(self) -> list[type["TelemetrySinkProtocol"]]:  # type: ignore[empty-body]
        """Return telemetry sink classes (not instances)."""
