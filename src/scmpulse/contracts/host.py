"""Protocol for the build host that dispatches checkout hooks.

The host owns job configuration, the tracked-job policy and any global
tags. The checkout listener only reads through this protocol.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scmpulse.contracts.build import JobConfiguration, RunContext, TagMap


@runtime_checkable
class CheckoutHost(Protocol):
    """Read-only view of host state needed to emit checkout telemetry.

    Error handling:
        - get_configuration() returns None when the job has no settings
        - is_tracked() never raises for unknown jobs, it returns False
        - build_extra_tags() may raise; the listener degrades to no extra tags
    """

    def get_configuration(self, job_full_name: str) -> "JobConfiguration | None":
        """Return telemetry settings for a job, or None if it has none."""
        ...

    def is_tracked(self, job_full_name: str) -> bool:
        """Return True if the job passes the allow/deny-list policy."""
        ...

    def build_extra_tags(self, context: "RunContext") -> "TagMap":
        """Return global and job-level tags for a run.

        May perform host I/O (e.g. reading the run environment).
        """
        ...
