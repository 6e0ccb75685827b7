"""Settings-driven host adapter.

SettingsHost answers the CheckoutHost questions from ScmPulseSettings, so a
build system without its own job-property store (or a CI step calling the
CLI) can drive the checkout listener. EnvironmentRun exposes the CI
environment variables of the current process as a RunHandle.
"""

from __future__ import annotations

import os
import re
import string
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from scmpulse.contracts.build import JobConfiguration, RunContext, TagMap, freeze_tag_map
from scmpulse.core.config import ScmPulseSettings
from scmpulse.core.tags import job_tags_from_patterns, merge_tags, parse_tags
from scmpulse.core.tracking import JobTracker, normalize_job_name


def expand_tag_values(tags: TagMap, env: Mapping[str, str]) -> TagMap:
    """Expand $VAR and ${VAR} references in tag values from a run environment.

    Unknown variables are left as written.
    """
    if not tags:
        return tags
    return freeze_tag_map(
        {key: {string.Template(value).safe_substitute(env) for value in values} for key, values in tags.items()}
    )


class SettingsHost:
    """CheckoutHost backed by ScmPulseSettings.

    - get_configuration(): first ``jobs`` entry whose pattern matches
    - is_tracked(): whitelist/blacklist via JobTracker
    - build_extra_tags(): global tags + pattern job tags + job tags, with
      $VAR references expanded from the run environment
    """

    def __init__(self, settings: ScmPulseSettings) -> None:
        self._tracker = JobTracker(allow=settings.whitelist, deny=settings.blacklist)
        self._jobs = tuple(
            (re.compile(job.pattern), JobConfiguration(emit_on_checkout=job.emit_on_checkout, tags=parse_tags(job.tags)))
            for job in settings.jobs
        )
        self._job_tag_patterns = tuple((re.compile(entry.pattern), tuple(entry.tags)) for entry in settings.global_job_tags)
        self._global_tags = parse_tags(settings.global_tags)

    def get_configuration(self, job_full_name: str) -> JobConfiguration | None:
        name = normalize_job_name(job_full_name)
        for pattern, configuration in self._jobs:
            if pattern.fullmatch(name):
                return configuration
        return None

    def is_tracked(self, job_full_name: str) -> bool:
        return self._tracker.is_tracked(job_full_name)

    def build_extra_tags(self, context: RunContext) -> TagMap:
        """Merge global, pattern-derived and job-level tags for a run.

        Raises:
            OSError: If the run environment cannot be read
        """
        name = normalize_job_name(context.job_full_name)
        configuration = self.get_configuration(context.job_full_name)
        tags = merge_tags(
            self._global_tags,
            job_tags_from_patterns(name, self._job_tag_patterns),
            configuration.tags if configuration is not None else None,
        )
        if not any("$" in value for values in tags.values() for value in values):
            return tags
        return expand_tag_values(tags, context.run.get_environment(context.output))


@dataclass(frozen=True, slots=True)
class EnvironmentRun:
    """RunHandle read from CI environment variables.

    Uses the Jenkins variable names (BUILD_NUMBER, BUILD_ID, BUILD_URL, ...),
    which most CI systems can export.
    """

    number: int
    run_id: str
    url: str | None = None
    result: str | None = None
    started_at: datetime | None = None
    duration_ms: int | None = None
    environment: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> EnvironmentRun:
        """Build a run handle from ``environ`` (defaults to os.environ).

        Raises:
            ValueError: If BUILD_NUMBER is set but not an integer
        """
        env = dict(os.environ if environ is None else environ)
        number = int(env.get("BUILD_NUMBER") or 0)
        run_id = env.get("BUILD_ID") or env.get("BUILD_TAG") or str(number)
        return cls(
            number=number,
            run_id=run_id,
            url=env.get("BUILD_URL") or None,
            result=env.get("BUILD_RESULT") or None,
            environment=env,
        )

    def get_environment(self, output: TextIO | None) -> Mapping[str, str]:
        return self.environment
