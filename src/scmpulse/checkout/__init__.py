"""Checkout telemetry pipeline.

Usage:
    from scmpulse.checkout import CheckoutListener

    listener = CheckoutListener(host, sink)
    listener.on_checkout(context)
"""

from scmpulse.checkout.eligibility import is_eligible
from scmpulse.checkout.listener import CheckoutListener
from scmpulse.checkout.metadata import collect_build_metadata
from scmpulse.checkout.payload import build_checkout_counter, build_checkout_event

__all__ = [
    "CheckoutListener",
    "build_checkout_counter",
    "build_checkout_event",
    "collect_build_metadata",
    "is_eligible",
]
