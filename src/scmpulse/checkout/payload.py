"""Build the checkout event and counter payloads.

Both builders are pure: the same metadata, tags and host always give the
same payload, which keeps golden-output tests stable.
"""

from __future__ import annotations

from collections.abc import Sequence

from scmpulse.contracts.build import BuildMetadata
from scmpulse.contracts.enums import AlertType, EventPriority
from scmpulse.contracts.events import CHECKOUT_COUNTER_NAME, CheckoutEvent, CounterMetric


def _build_reference(metadata: BuildMetadata) -> str:
    if metadata.build_url:
        return f"[#{metadata.build_number}]({metadata.build_url})"
    return f"#{metadata.build_number}"


def build_checkout_event(metadata: BuildMetadata, tags: Sequence[str], hostname: str) -> CheckoutEvent:
    """Describe a finished checkout as a CheckoutEvent.

    Args:
        metadata: Collected build metadata
        tags: Assembled "key:value" tags
        hostname: Resolved host name (may be the placeholder)
    """
    title = f"Job {metadata.job_name} build #{metadata.build_number} checkout finished on {hostname}"

    lines = [
        "%%%",
        f"Checkout of job {metadata.job_name} build {_build_reference(metadata)} finished on {hostname}.",
    ]
    if metadata.branch:
        lines.append(f"Branch: {metadata.branch}")
    if metadata.node_name:
        lines.append(f"Node: {metadata.node_name}")
    lines.append(f"Result: {metadata.result.value}")
    lines.append("%%%")

    date_happened = int(metadata.started_at.timestamp()) if metadata.started_at is not None else None

    return CheckoutEvent(
        title=title,
        text="\n".join(lines),
        host=hostname,
        tags=tuple(tags),
        aggregation_key=metadata.job_name,
        alert_type=AlertType.INFO,
        priority=EventPriority.LOW,
        date_happened=date_happened,
    )


def build_checkout_counter(tags: Sequence[str], hostname: str) -> CounterMetric:
    """Counter increment carrying the same tags as the checkout event."""
    return CounterMetric(name=CHECKOUT_COUNTER_NAME, host=hostname, tags=tuple(tags))
