"""Protocol definitions for telemetry sinks.

Sinks deliver checkout events and counters to an observability backend
(Datadog API, DogStatsD agent, console, ...).
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scmpulse.contracts.events import CheckoutEvent


@runtime_checkable
class TelemetrySinkProtocol(Protocol):
    """Protocol for telemetry sinks.

    Lifecycle:
        1. Discovery: scmpulse_get_sinks hook returns sink classes
        2. Instantiation: create_sink() creates one instance
        3. Configuration: configure() called with sink-specific options
        4. Operation: send_event() then increment_counter() per checkout
        5. Shutdown: flush() then close() when the host adapter exits

    Error handling:
        - configure() MUST raise TelemetrySinkError on invalid options
        - send_event() and increment_counter() make one delivery attempt and
          may raise TelemetrySinkError; the caller isolates the failure
        - close() MUST be idempotent
    """

    @property
    def name(self) -> str:
        """Sink name for configuration reference.

            sink:
              name: datadog  # matches this property
        """
        ...

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the sink with options from settings.

        Raises:
            TelemetrySinkError: If options are invalid or incomplete
        """
        ...

    def send_event(self, event: "CheckoutEvent") -> None:
        """Deliver one event, at most once."""
        ...

    def increment_counter(self, name: str, host: str, tags: Sequence[str]) -> None:
        """Increment counter ``name`` by one, tagged like the event."""
        ...

    def flush(self) -> None:
        """Flush buffered payloads. No-op for unbuffered sinks."""
        ...

    def close(self) -> None:
        """Release resources. Safe to call more than once."""
        ...
