"""Build-side contracts: what the host hands in and what the collector produces.

These types answer: "Which run checked out, and what do we know about it?"

IMPORTANT:
- RunContext is borrowed from the host for one hook call and never stored
- BuildMetadata is built fresh per call; its tag map is read-only
- CollectionFailure is returned, not raised, when metadata cannot be read
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Protocol, TextIO, runtime_checkable

from scmpulse.contracts.enums import BuildResult, CollectionFailureReason

TagMap = Mapping[str, frozenset[str]]
"""Tag key to deduplicated tag values. An empty value is a bare tag."""

EMPTY_TAGS: TagMap = MappingProxyType({})


def freeze_tag_map(tags: Mapping[str, Iterable[str]] | None) -> TagMap:
    """Return a read-only copy of a tag mapping with frozenset values.

    Keys whose value collection is empty are kept; they still mark the key
    as present for the union in ``merge_tags``.
    """
    if not tags:
        return EMPTY_TAGS
    return MappingProxyType({key: frozenset(values) for key, values in tags.items()})


@runtime_checkable
class RunHandle(Protocol):
    """One execution of a job, as exposed by the host.

    ``get_environment`` may block on host I/O and may raise ``OSError`` or
    ``InterruptedError``. The other attributes are plain reads.
    """

    @property
    def number(self) -> int: ...

    @property
    def run_id(self) -> str: ...

    @property
    def url(self) -> str | None: ...

    @property
    def result(self) -> str | None: ...

    @property
    def started_at(self) -> datetime | None: ...

    @property
    def duration_ms(self) -> int | None: ...

    def get_environment(self, output: TextIO | None) -> Mapping[str, str]: ...


@dataclass(frozen=True, slots=True)
class RunContext:
    """Everything the host supplies for one checkout hook call.

    Attributes:
        job_full_name: Full job name including folders (e.g. "team/app/main")
        run: Handle to the running build
        output: Build log stream, if the host exposes one
        workspace: Checked-out workspace, if the host exposes one
    """

    job_full_name: str
    run: RunHandle
    output: TextIO | None = None
    workspace: Path | None = None


@dataclass(frozen=True, slots=True)
class JobConfiguration:
    """Per-job telemetry settings owned by the host.

    Attributes:
        emit_on_checkout: Checkout events are sent only when this is True
        tags: Job-level tags added to every event for this job
    """

    emit_on_checkout: bool = False
    tags: TagMap = field(default_factory=lambda: EMPTY_TAGS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", freeze_tag_map(self.tags))


@dataclass(frozen=True, slots=True)
class BuildMetadata:
    """Normalized snapshot of a run taken at checkout time.

    Attributes:
        run_id: Host identifier of the run
        build_number: Sequential build number within the job
        job_name: Normalized job name ("»" separators become "/")
        result: Build result, UNKNOWN while the build is still running
        started_at: When the run started, if known
        duration_ms: Elapsed run time, if known
        node_name: Agent the run executes on, if known
        branch: Normalized branch name, if known
        build_url: Link to the run, if known
        user_id: User who triggered the run, if known
        tags: Tags derived from the fields above
    """

    run_id: str
    build_number: int
    job_name: str
    result: BuildResult = BuildResult.UNKNOWN
    started_at: datetime | None = None
    duration_ms: int | None = None
    node_name: str | None = None
    branch: str | None = None
    build_url: str | None = None
    user_id: str | None = None
    tags: TagMap = field(default_factory=lambda: EMPTY_TAGS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", freeze_tag_map(self.tags))


@dataclass(frozen=True, slots=True)
class CollectionFailure:
    """Explicit result for metadata that could not be collected.

    Returned by the collector in place of BuildMetadata. The caller logs it
    and stops; collection is never retried because the checkout that
    triggered it has already happened.
    """

    reason: CollectionFailureReason
    message: str
