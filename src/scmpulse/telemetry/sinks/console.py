"""Console sink for checkout telemetry.

Writes events and counters to stdout or stderr in JSON or human-readable
format. Primarily used for local debugging and dry runs in CI.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Sequence
from dataclasses import asdict
from enum import Enum
from typing import TYPE_CHECKING, Any, Literal, TextIO, TypeGuard

import structlog

from scmpulse.telemetry.errors import TelemetrySinkError

if TYPE_CHECKING:
    from scmpulse.contracts.events import CheckoutEvent

logger = structlog.get_logger(__name__)


def _is_valid_format(v: str) -> TypeGuard[Literal["json", "pretty"]]:
    """TypeGuard for format validation - enables mypy type narrowing."""
    return v in {"json", "pretty"}


def _is_valid_output(v: str) -> TypeGuard[Literal["stdout", "stderr"]]:
    """TypeGuard for output validation - enables mypy type narrowing."""
    return v in {"stdout", "stderr"}


class ConsoleSink:
    """Write checkout telemetry to stdout/stderr.

    Supports two output formats:
    - json: One JSON object per line (for machine processing)
    - pretty: Human-readable line per payload

    Configuration options:
        format: Output format - "json" (default) or "pretty"
        output: Output stream - "stdout" (default) or "stderr"

    Example configuration:
        sink:
          name: console
          options:
            format: pretty
            output: stderr
    """

    _name = "console"

    _VALID_FORMATS: frozenset[str] = frozenset({"json", "pretty"})
    _VALID_OUTPUTS: frozenset[str] = frozenset({"stdout", "stderr"})

    def __init__(self) -> None:
        """Initialize unconfigured sink."""
        self._format: Literal["json", "pretty"] = "json"
        self._output: Literal["stdout", "stderr"] = "stdout"
        self._stream: TextIO = sys.stdout

    @property
    def name(self) -> str:
        """Sink name for configuration reference."""
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the sink with options from settings.

        Raises:
            TelemetrySinkError: If configuration values are invalid
        """
        format_value = config.get("format", "json")
        if not isinstance(format_value, str):
            raise TelemetrySinkError(
                self._name,
                f"'format' must be a string, got {type(format_value).__name__}",
            )
        if _is_valid_format(format_value):
            self._format = format_value
        else:
            raise TelemetrySinkError(
                self._name,
                f"Invalid format '{format_value}'. Must be one of: {', '.join(sorted(self._VALID_FORMATS))}",
            )

        output_value = config.get("output", "stdout")
        if not isinstance(output_value, str):
            raise TelemetrySinkError(
                self._name,
                f"'output' must be a string, got {type(output_value).__name__}",
            )
        if _is_valid_output(output_value):
            self._output = output_value
        else:
            raise TelemetrySinkError(
                self._name,
                f"Invalid output '{output_value}'. Must be one of: {', '.join(sorted(self._VALID_OUTPUTS))}",
            )
        self._stream = sys.stdout if self._output == "stdout" else sys.stderr

        logger.debug("Console sink configured", format=self._format, output=self._output)

    def send_event(self, event: CheckoutEvent) -> None:
        if self._format == "json":
            line = json.dumps(self._serialize_event(event))
        else:
            line = f"[event] {event.title} (host={event.host}, tags={','.join(event.tags)})"
        self._write(line)

    def increment_counter(self, name: str, host: str, tags: Sequence[str]) -> None:
        if self._format == "json":
            line = json.dumps({"type": "counter", "metric": name, "host": host, "tags": list(tags), "value": 1})
        else:
            line = f"[counter] {name} +1 (host={host}, tags={','.join(tags)})"
        self._write(line)

    def _serialize_event(self, event: CheckoutEvent) -> dict[str, Any]:
        """Serialize event for JSON output (Enum -> value, tuple -> list)."""
        data: dict[str, Any] = {"type": "event"}
        for key, value in asdict(event).items():
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            data[key] = value
        return data

    def _write(self, line: str) -> None:
        try:
            print(line, file=self._stream)
        except (OSError, ValueError) as e:
            # ValueError: write to a closed stream
            raise TelemetrySinkError(self._name, f"write to {self._output} failed: {e}") from e

    def flush(self) -> None:
        """Flush the underlying stream so output is visible immediately."""
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            logger.warning("Failed to flush console stream", sink=self._name, error=str(e))

    def close(self) -> None:
        """No-op: the sink does not own stdout/stderr."""
        pass
