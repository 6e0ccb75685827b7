"""Checkout listener: the entry point host adapters call after a checkout.

Pipeline per call:
1. Eligibility (job configuration + tracked-job policy)
2. Build metadata collection
3. Extra tags from the host, merged with metadata tags
4. Event and counter payloads
5. sink.send_event(), then sink.increment_counter()

Failure isolation:
- Metadata collection failure: one error log, nothing sent
- Extra tags failure: one warning log, emission continues without them
- Anything else, sink failures included: one warning log, swallowed

on_checkout() never raises and never returns data to the host. A missing
event or counter is the only visible symptom of a failure.

Thread Safety:
    The listener holds only its collaborators. All per-checkout state lives
    in locals, so concurrent calls for different runs do not interfere as
    long as the sink itself is thread-safe.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

from scmpulse.checkout.eligibility import is_eligible
from scmpulse.checkout.metadata import collect_build_metadata
from scmpulse.checkout.payload import build_checkout_counter, build_checkout_event
from scmpulse.contracts.build import EMPTY_TAGS, CollectionFailure, RunContext, TagMap
from scmpulse.core.hostname import resolve_hostname
from scmpulse.core.tags import assemble_tags

if TYPE_CHECKING:
    from scmpulse.contracts.host import CheckoutHost
    from scmpulse.telemetry.protocols import TelemetrySinkProtocol


class CheckoutListener:
    """Emit a checkout event and counter for eligible runs.

    Example:
        >>> listener = CheckoutListener(host, sink)
        >>> listener.on_checkout(RunContext(job_full_name="demo/main", run=run))
    """

    def __init__(
        self,
        host: CheckoutHost,
        sink: TelemetrySinkProtocol,
        *,
        hostname: str | None = None,
        hostname_resolver: Callable[[str | None], str] = resolve_hostname,
        logger: structlog.typing.FilteringBoundLogger | structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        """Initialize the listener.

        Args:
            host: Host view for job configuration, tracking and extra tags
            sink: Destination for the event and counter
            hostname: Configured host name override, passed to the resolver
            hostname_resolver: Maps the override to the reported host name
            logger: Logger to report failures on (defaults to this module's)
        """
        self._host = host
        self._sink = sink
        self._hostname = hostname
        self._hostname_resolver = hostname_resolver
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def on_checkout(self, context: RunContext) -> None:
        """Handle one finished checkout. Never raises."""
        try:
            self._emit(context)
        except Exception as e:
            self._logger.warning(
                "Unexpected exception occurred",
                job=context.job_full_name,
                error=str(e),
                error_type=type(e).__name__,
            )

    def _emit(self, context: RunContext) -> None:
        job_full_name = context.job_full_name
        configuration = self._host.get_configuration(job_full_name)
        if not is_eligible(job_full_name, configuration, self._host.is_tracked):
            return

        self._logger.debug("Checkout finished, emitting telemetry", job=job_full_name)

        metadata = collect_build_metadata(context)
        if isinstance(metadata, CollectionFailure):
            self._logger.error(
                "Build metadata collection failed",
                job=job_full_name,
                reason=metadata.reason.value,
                error=metadata.message,
            )
            return

        tags = assemble_tags(metadata, self._collect_extra_tags(context))
        hostname = self._hostname_resolver(self._hostname)

        event = build_checkout_event(metadata, tags, hostname)
        counter = build_checkout_counter(tags, hostname)

        # Event first: a counter is only ever incremented for a handed-off event
        self._sink.send_event(event)
        self._sink.increment_counter(counter.name, counter.host, counter.tags)

    def _collect_extra_tags(self, context: RunContext) -> TagMap:
        try:
            return self._host.build_extra_tags(context)
        except Exception as e:
            self._logger.warning(
                "Extra tags unavailable, emitting without them",
                job=context.job_full_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return EMPTY_TAGS
