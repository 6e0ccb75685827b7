"""Telemetry payloads sent to a sink.

Both payloads are built once per checkout, handed to the sink once and then
discarded. Tags are already flattened to "key:value" strings.
"""

from dataclasses import dataclass

from scmpulse.contracts.enums import AlertType, EventPriority

CHECKOUT_COUNTER_NAME = "jenkins.scm.checkout"
HOSTNAME_PLACEHOLDER = "null"
SOURCE_TYPE_NAME = "jenkins"


@dataclass(frozen=True, slots=True)
class CheckoutEvent:
    """Event describing one finished checkout.

    Attributes:
        title: One-line summary
        text: Markdown body
        host: Reporting host, HOSTNAME_PLACEHOLDER when unresolvable
        tags: Assembled "key:value" tags
        aggregation_key: Groups events of the same job at the backend
        alert_type: Alert level, always INFO for checkouts
        priority: Event priority, always LOW for checkouts
        source_type_name: Integration name shown by the backend
        date_happened: Epoch seconds of the run start, if known
    """

    title: str
    text: str
    host: str
    tags: tuple[str, ...]
    aggregation_key: str
    alert_type: AlertType = AlertType.INFO
    priority: EventPriority = EventPriority.LOW
    source_type_name: str = SOURCE_TYPE_NAME
    date_happened: int | None = None


@dataclass(frozen=True, slots=True)
class CounterMetric:
    """Counter increment tagged like its CheckoutEvent."""

    name: str
    host: str
    tags: tuple[str, ...]
    value: int = 1
