"""Datadog HTTP API sink.

Posts checkout events to /api/v1/events and counter increments to
/api/v1/series. Each call is a single delivery attempt; transport errors
and non-2xx responses surface as TelemetrySinkError.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import httpx
import structlog

from scmpulse.telemetry.errors import TelemetrySinkError

if TYPE_CHECKING:
    from scmpulse.contracts.events import CheckoutEvent

logger = structlog.get_logger(__name__)

_EVENTS_PATH = "/api/v1/events"
_SERIES_PATH = "/api/v1/series"


class DatadogSink:
    """Send checkout telemetry to the Datadog HTTP API.

    Configuration options:
        api_key: Datadog API key (required)
        site: API base URL (default: "https://api.datadoghq.com")
        timeout_seconds: Per-request timeout (default: 10)

    Example configuration:
        sink:
          name: datadog
          options:
            api_key: ${DD_API_KEY}
            site: https://api.datadoghq.eu
            timeout_seconds: 5
    """

    _name = "datadog"

    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize unconfigured sink.

        Args:
            transport: httpx transport override (tests use httpx.MockTransport)
            clock: Source of counter timestamps in epoch seconds
        """
        self._transport = transport
        self._clock = clock
        self._client: httpx.Client | None = None
        self._site: str = "https://api.datadoghq.com"

    @property
    def name(self) -> str:
        """Sink name for configuration reference."""
        return self._name

    def configure(self, config: dict[str, Any]) -> None:
        """Configure the sink with options from settings.

        Raises:
            TelemetrySinkError: If api_key is missing or an option has the wrong type
        """
        api_key = config.get("api_key")
        if not isinstance(api_key, str) or not api_key:
            raise TelemetrySinkError(self._name, "'api_key' is required and must be a non-empty string")

        site = config.get("site", "https://api.datadoghq.com")
        if not isinstance(site, str):
            raise TelemetrySinkError(
                self._name,
                f"'site' must be a string, got {type(site).__name__}",
            )
        if not site.startswith(("https://", "http://")):
            raise TelemetrySinkError(self._name, f"'site' must be an http(s) URL, got {site!r}")
        self._site = site.rstrip("/")

        timeout = config.get("timeout_seconds", 10)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise TelemetrySinkError(
                self._name,
                f"'timeout_seconds' must be a number, got {type(timeout).__name__}",
            )
        if timeout <= 0:
            raise TelemetrySinkError(self._name, f"'timeout_seconds' must be positive, got {timeout}")

        if self._client is not None:
            self._client.close()
        self._client = httpx.Client(
            base_url=self._site,
            headers={"DD-API-KEY": api_key, "Content-Type": "application/json"},
            timeout=float(timeout),
            transport=self._transport,
        )

        logger.debug("Datadog sink configured", site=self._site, timeout_seconds=timeout)

    def send_event(self, event: CheckoutEvent) -> None:
        payload: dict[str, Any] = {
            "title": event.title,
            "text": event.text,
            "host": event.host,
            "tags": list(event.tags),
            "aggregation_key": event.aggregation_key,
            "alert_type": event.alert_type.value,
            "priority": event.priority.value,
            "source_type_name": event.source_type_name,
        }
        if event.date_happened is not None:
            payload["date_happened"] = event.date_happened
        self._post(_EVENTS_PATH, payload)

    def increment_counter(self, name: str, host: str, tags: Sequence[str]) -> None:
        payload = {
            "series": [
                {
                    "metric": name,
                    "points": [[int(self._clock()), 1]],
                    "type": "count",
                    "host": host,
                    "tags": list(tags),
                }
            ]
        }
        self._post(_SERIES_PATH, payload)

    def _post(self, path: str, payload: dict[str, Any]) -> None:
        if self._client is None:
            raise TelemetrySinkError(self._name, "sink used before configure()")
        try:
            response = self._client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TelemetrySinkError(
                self._name,
                f"{path} returned HTTP {e.response.status_code}",
            ) from e
        except httpx.HTTPError as e:
            raise TelemetrySinkError(self._name, f"{path} request failed: {e}") from e

    def flush(self) -> None:
        """No-op: every payload is posted synchronously."""

    def close(self) -> None:
        """Close the HTTP client. Idempotent."""
        if self._client is not None:
            self._client.close()
            self._client = None
