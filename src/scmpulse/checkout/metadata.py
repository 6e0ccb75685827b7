"""Collect normalized build metadata at checkout time.

Collection makes exactly one attempt. Reading the run environment can block
on the host and can fail with OSError or InterruptedError; both come back
as a CollectionFailure instead of an exception.
"""

from __future__ import annotations

from collections.abc import Mapping

from scmpulse.contracts.build import BuildMetadata, CollectionFailure, RunContext, freeze_tag_map
from scmpulse.contracts.enums import BuildResult, CollectionFailureReason
from scmpulse.core.tracking import normalize_job_name

_BRANCH_ENV_VARS = ("GIT_BRANCH", "BRANCH_NAME", "CVS_BRANCH")
_BRANCH_PREFIXES = ("refs/heads/", "origin/")


def normalize_branch(branch: str | None) -> str | None:
    """Strip "refs/heads/" and "origin/" prefixes from a branch name."""
    if not branch:
        return None
    branch = branch.strip()
    for prefix in _BRANCH_PREFIXES:
        if branch.startswith(prefix):
            branch = branch[len(prefix) :]
    return branch or None


def parse_result(result: str | None) -> BuildResult:
    """Map a host result string to BuildResult, UNKNOWN when unset or unrecognized."""
    if not result:
        return BuildResult.UNKNOWN
    try:
        return BuildResult(result.strip().upper())
    except ValueError:
        return BuildResult.UNKNOWN


def _first(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def collect_build_metadata(context: RunContext) -> BuildMetadata | CollectionFailure:
    """Snapshot the run in ``context`` as BuildMetadata.

    Returns:
        BuildMetadata on success, CollectionFailure when the run environment
        could not be read.
    """
    run = context.run
    try:
        env = run.get_environment(context.output)
    except InterruptedError as e:
        # InterruptedError is an OSError subclass, so it is checked first
        return CollectionFailure(reason=CollectionFailureReason.INTERRUPTED, message=str(e) or "interrupted")
    except OSError as e:
        return CollectionFailure(reason=CollectionFailureReason.IO, message=str(e) or type(e).__name__)

    job_name = normalize_job_name(context.job_full_name)
    result = parse_result(run.result)
    node_name = env.get("NODE_NAME") or None
    branch = normalize_branch(_first(env, _BRANCH_ENV_VARS))
    user_id = env.get("BUILD_USER_ID") or None

    tags: dict[str, set[str]] = {"job": {job_name}, "result": {result.value}}
    if node_name:
        tags["node"] = {node_name}
    if branch:
        tags["branch"] = {branch}
    if user_id:
        tags["user_id"] = {user_id}

    return BuildMetadata(
        run_id=run.run_id,
        build_number=run.number,
        job_name=job_name,
        result=result,
        started_at=run.started_at,
        duration_ms=run.duration_ms,
        node_name=node_name,
        branch=branch,
        build_url=run.url or None,
        user_id=user_id,
        tags=freeze_tag_map(tags),
    )
