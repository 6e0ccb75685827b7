"""DogStatsD sink for a local Datadog agent.

Writes events and counters as DogStatsD datagrams over UDP:

    _e{<title len>,<text len>}:<title>|<text>|d:<ts>|h:<host>|k:<key>|p:<prio>|s:<source>|t:<alert>|#<tags>
    <metric>:1|c|#<tags>

UDP is fire-and-forget: a datagram that leaves the socket counts as sent.
"""

from __future__ import annotations

import socket
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from scmpulse.contracts.events import HOSTNAME_PLACEHOLDER
from scmpulse.telemetry.errors import TelemetrySinkError

if TYPE_CHECKING:
    from scmpulse.contracts.events import CheckoutEvent

logger = structlog.get_logger(__name__)


def _escape(value: str) -> str:
    return value.replace("\n", "\\n")


def _clean_tag(tag: str) -> str:
    # "|" and "," are datagram delimiters
    return tag.replace("|", "_").replace(",", "_")


def format_event(event: CheckoutEvent) -> str:
    """Render an event as a DogStatsD event datagram.

    The host field is left out for the placeholder host, so the agent
    stamps its own.
    """
    title = _escape(event.title)
    text = _escape(event.text)
    parts = [f"_e{{{len(title.encode())},{len(text.encode())}}}:{title}|{text}"]
    if event.date_happened is not None:
        parts.append(f"d:{event.date_happened}")
    if event.host and event.host != HOSTNAME_PLACEHOLDER:
        parts.append(f"h:{event.host}")
    parts.append(f"k:{event.aggregation_key}")
    parts.append(f"p:{event.priority.value}")
    parts.append(f"s:{event.source_type_name}")
    parts.append(f"t:{event.alert_type.value}")
    if event.tags:
        parts.append("#" + ",".join(_clean_tag(tag) for tag in event.tags))
    return "|".join(parts)


def format_counter(name: str, host: str, tags: Sequence[str], value: int = 1) -> str:
    """Render a counter increment as a DogStatsD metric datagram.

    The agent stamps its own host; an explicit host is sent as a ``host`` tag
    unless it is the placeholder.
    """
    all_tags = [_clean_tag(tag) for tag in tags]
    if host and host != HOSTNAME_PLACEHOLDER:
        all_tags.append(f"host:{host}")
    datagram = f"{name}:{value}|c"
    if all_tags:
        datagram += "|#" + ",".join(all_tags)
    return datagram


class DogStatsDSink:
    """Send checkout telemetry to a DogStatsD agent over UDP.

    Configuration options:
        host: Agent hostname (default: "localhost")
        port: Agent DogStatsD port (default: 8125)

    Example configuration:
        sink:
          name: dogstatsd
          options:
            host: datadog-agent.internal
            port: 8125
    """

    _name = "dogstatsd"

    def __init__(self, *, socket_factory: Callable[[], socket.socket] | None = None) -> None:
        """Initialize unconfigured sink.

        Args:
            socket_factory: Returns a UDP socket (tests pass a mock)
        """
        self._socket_factory = socket_factory or (lambda: socket.socket(socket.AF_INET, socket.SOCK_DGRAM))
        self._socket: socket.socket | None = None
        self._address: tuple[str, int] = ("localhost", 8125)

    @property
    def name(self) -> str:
        """Sink name for configuration reference."""
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the sink with options from settings.

        Raises:
            TelemetrySinkError: If host or port are invalid
        """
        host = config.get("host", "localhost")
        if not isinstance(host, str) or not host:
            raise TelemetrySinkError(
                self._name,
                f"'host' must be a non-empty string, got {type(host).__name__}",
            )

        port = config.get("port", 8125)
        if isinstance(port, bool) or not isinstance(port, int):
            raise TelemetrySinkError(
                self._name,
                f"'port' must be an integer, got {type(port).__name__}",
            )
        if port < 1 or port > 65535:
            raise TelemetrySinkError(
                self._name,
                f"port must be a valid port number (1-65535), got {port}",
            )

        self._address = (host, port)
        self.close()
        self._socket = self._socket_factory()

        logger.debug("DogStatsD sink configured", host=host, port=port)

    def send_event(self, event: CheckoutEvent) -> None:
        self._send(format_event(event))

    def increment_counter(self, name: str, host: str, tags: Sequence[str]) -> None:
        self._send(format_counter(name, host, tags))

    def _send(self, datagram: str) -> None:
        if self._socket is None:
            raise TelemetrySinkError(self._name, "sink used before configure()")
        try:
            self._socket.sendto(datagram.encode("utf-8"), self._address)
        except OSError as e:
            raise TelemetrySinkError(self._name, f"datagram to {self._address[0]}:{self._address[1]} failed: {e}") from e

    def flush(self) -> None:
        """No-op: datagrams are sent immediately."""

    def close(self) -> None:
        """Close the UDP socket. Idempotent."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
