"""Tag parsing, merging and flattening.

Tags travel as a TagMap (key -> frozenset of values) until the last moment,
when assemble_tags() flattens them into sorted "key:value" strings for the
sink. Merging is a per-key set union: a key present in several sources ends
up with every value from every source, never just the last one.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

from scmpulse.contracts.build import EMPTY_TAGS, TagMap, freeze_tag_map

if TYPE_CHECKING:
    from scmpulse.contracts.build import BuildMetadata

_ENTRY_SEPARATOR = re.compile(r"[,\n]")
_GROUP_REFERENCE = re.compile(r"\$(\d+)")


def parse_tags(entries: str | Iterable[str] | None) -> TagMap:
    """Parse "key:value" entries into a TagMap.

    A single string is split on commas and newlines first. Each entry is
    split on its first colon; an entry without a colon is a bare tag and
    maps to an empty value. Blank entries are ignored.

    Example:
        >>> dict(parse_tags("team:ci, env:prod,team:ci"))
        {'team': frozenset({'ci'}), 'env': frozenset({'prod'})}
    """
    if entries is None:
        return EMPTY_TAGS
    if isinstance(entries, str):
        entries = _ENTRY_SEPARATOR.split(entries)

    parsed: dict[str, set[str]] = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        key, _, value = entry.partition(":")
        key = key.strip()
        if not key:
            continue
        parsed.setdefault(key, set()).add(value.strip())
    return freeze_tag_map(parsed)


def merge_tags(*sources: Mapping[str, Iterable[str]] | None) -> TagMap:
    """Union tag sources per key.

    Inputs are never mutated. None and empty sources contribute nothing, so
    merging with an empty map returns an equal map.
    """
    merged: dict[str, set[str]] = {}
    for source in sources:
        if not source:
            continue
        for key, values in source.items():
            merged.setdefault(key, set()).update(values)
    return freeze_tag_map(merged)


def flatten_tags(tags: Mapping[str, Iterable[str]] | None) -> tuple[str, ...]:
    """Render a TagMap as sorted "key:value" strings (bare tags as "key")."""
    if not tags:
        return ()
    flat = [f"{key}:{value}" if value else key for key in sorted(tags) for value in sorted(tags[key])]
    return tuple(flat)


def assemble_tags(metadata: BuildMetadata | None, extra: Mapping[str, Iterable[str]] | None) -> tuple[str, ...]:
    """Merge metadata-derived tags with extra tags and flatten for transport."""
    metadata_tags = metadata.tags if metadata is not None else EMPTY_TAGS
    return flatten_tags(merge_tags(metadata_tags, extra))


def job_tags_from_patterns(
    job_name: str,
    patterns: Iterable[tuple[re.Pattern[str], Sequence[str]]],
) -> TagMap:
    """Derive tags from job-name patterns.

    For every pattern that fully matches ``job_name``, ``$1``..``$n`` in its
    tag entries are replaced by the matching groups. A reference to a group
    that does not exist or did not participate becomes an empty string.

    Example:
        >>> pattern = re.compile(r"(.*?)/(.*)")
        >>> dict(job_tags_from_patterns("payments/api", [(pattern, ["team:$1", "service:$2"])]))
        {'team': frozenset({'payments'}), 'service': frozenset({'api'})}
    """
    collected: list[TagMap] = []
    for pattern, entries in patterns:
        match = pattern.fullmatch(job_name)
        if match is None:
            continue

        def _group(reference: re.Match[str], match: re.Match[str] = match) -> str:
            index = int(reference.group(1))
            if index > (match.re.groups or 0):
                return ""
            return match.group(index) or ""

        collected.append(parse_tags(_GROUP_REFERENCE.sub(_group, entry) for entry in entries))
    return merge_tags(*collected)
