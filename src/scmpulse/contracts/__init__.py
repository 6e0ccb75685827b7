"""Shared contracts for cross-module data types.

This package is a LEAF MODULE with no outbound dependencies to core,
checkout or telemetry.

Import patterns:
    from scmpulse.contracts import BuildMetadata, CheckoutEvent, RunContext

    # Settings classes live in core
    from scmpulse.core.config import ScmPulseSettings
"""

from scmpulse.contracts.build import (
    EMPTY_TAGS,
    BuildMetadata,
    CollectionFailure,
    JobConfiguration,
    RunContext,
    RunHandle,
    TagMap,
    freeze_tag_map,
)
from scmpulse.contracts.enums import (
    AlertType,
    BuildResult,
    CollectionFailureReason,
    EventPriority,
)
from scmpulse.contracts.events import (
    CHECKOUT_COUNTER_NAME,
    HOSTNAME_PLACEHOLDER,
    SOURCE_TYPE_NAME,
    CheckoutEvent,
    CounterMetric,
)
from scmpulse.contracts.host import CheckoutHost

__all__ = [
    "CHECKOUT_COUNTER_NAME",
    "EMPTY_TAGS",
    "HOSTNAME_PLACEHOLDER",
    "SOURCE_TYPE_NAME",
    "AlertType",
    "BuildMetadata",
    "BuildResult",
    "CheckoutEvent",
    "CheckoutHost",
    "CollectionFailure",
    "CollectionFailureReason",
    "CounterMetric",
    "EventPriority",
    "JobConfiguration",
    "RunContext",
    "RunHandle",
    "TagMap",
    "freeze_tag_map",
]
