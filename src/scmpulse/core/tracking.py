"""Allow/deny-list policy deciding which jobs are tracked."""

from __future__ import annotations

import re
from collections.abc import Iterable

_FOLDER_SEPARATOR = re.compile(r"\s*»\s*")
_WHITESPACE = re.compile(r"\s+")


def normalize_job_name(name: str) -> str:
    """Normalize a host job name for tagging and matching.

    Display separators ("»") become "/" and whitespace is removed, so
    "Team » My App" becomes "Team/MyApp".
    """
    return _WHITESPACE.sub("", _FOLDER_SEPARATOR.sub("/", name))


def compile_job_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    """Compile job-name patterns, skipping blank entries.

    Raises:
        re.error: If a pattern is not a valid regular expression
    """
    return tuple(re.compile(pattern.strip()) for pattern in patterns if pattern.strip())


class JobTracker:
    """Decide whether a job is tracked.

    A job is tracked when it matches no deny-list pattern and either the
    allow-list is empty or it matches at least one allow-list pattern.
    Patterns must match the whole normalized job name.

    Example:
        >>> tracker = JobTracker(allow=["team/.*"], deny=["team/sandbox"])
        >>> tracker.is_tracked("team/app"), tracker.is_tracked("team/sandbox")
        (True, False)
    """

    def __init__(self, allow: Iterable[str] = (), deny: Iterable[str] = ()) -> None:
        self._allow = compile_job_patterns(allow)
        self._deny = compile_job_patterns(deny)

    def is_included(self, job_full_name: str) -> bool:
        """Return True if the allow-list admits the job."""
        if not self._allow:
            return True
        name = normalize_job_name(job_full_name)
        return any(pattern.fullmatch(name) for pattern in self._allow)

    def is_excluded(self, job_full_name: str) -> bool:
        """Return True if the deny-list rejects the job."""
        name = normalize_job_name(job_full_name)
        return any(pattern.fullmatch(name) for pattern in self._deny)

    def is_tracked(self, job_full_name: str) -> bool:
        return not self.is_excluded(job_full_name) and self.is_included(job_full_name)
