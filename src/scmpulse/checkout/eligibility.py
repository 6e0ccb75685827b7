"""Decide whether a checkout should produce telemetry."""

from collections.abc import Callable

from scmpulse.contracts.build import JobConfiguration


def is_eligible(
    job_full_name: str,
    configuration: JobConfiguration | None,
    is_tracked: Callable[[str], bool],
) -> bool:
    """Return True only for tracked jobs that opted in to checkout events.

    A job with no configuration is simply not enabled. That is not an error
    and nothing is logged for it.

    Args:
        job_full_name: Full job name as reported by the host
        configuration: Job settings, None when the job has none
        is_tracked: Host allow/deny-list predicate
    """
    if configuration is None or not configuration.emit_on_checkout:
        return False
    return is_tracked(job_full_name)
