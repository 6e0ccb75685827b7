# tests/unit/core/test_tags.py
"""Tests for tag parsing, merging and flattening."""

import re

import pytest

from scmpulse.contracts import BuildMetadata
from scmpulse.core.tags import assemble_tags, flatten_tags, job_tags_from_patterns, merge_tags, parse_tags


class TestParseTags:
    def test_none_is_empty(self) -> None:
        assert dict(parse_tags(None)) == {}

    def test_list_of_entries(self) -> None:
        assert dict(parse_tags(["team:ci", "env:prod"])) == {
            "team": frozenset({"ci"}),
            "env": frozenset({"prod"}),
        }

    def test_string_split_on_commas_and_newlines(self) -> None:
        assert dict(parse_tags("team:ci, env:prod\nregion:eu")) == {
            "team": frozenset({"ci"}),
            "env": frozenset({"prod"}),
            "region": frozenset({"eu"}),
        }

    def test_repeated_key_collects_values(self) -> None:
        assert parse_tags(["team:ci", "team:infra", "team:ci"])["team"] == frozenset({"ci", "infra"})

    def test_value_keeps_later_colons(self) -> None:
        assert parse_tags(["url:https://example.com"])["url"] == frozenset({"https://example.com"})

    def test_bare_tag_maps_to_empty_value(self) -> None:
        assert parse_tags(["canary"])["canary"] == frozenset({""})

    def test_blank_entries_and_keys_ignored(self) -> None:
        assert dict(parse_tags(["", "  ", ":orphan"])) == {}


class TestMergeTags:
    def test_union_per_key(self) -> None:
        merged = merge_tags({"team": {"a"}}, {"team": {"b"}, "env": {"prod"}})

        assert dict(merged) == {"team": frozenset({"a", "b"}), "env": frozenset({"prod"})}

    def test_none_and_empty_sources_ignored(self) -> None:
        assert dict(merge_tags(None, {}, {"k": {"v"}})) == {"k": frozenset({"v"})}

    def test_inputs_not_mutated(self) -> None:
        first = {"team": {"a"}}
        second = {"team": {"b"}}

        merge_tags(first, second)

        assert first == {"team": {"a"}}
        assert second == {"team": {"b"}}


class TestFlattenTags:
    def test_sorted_key_value_strings(self) -> None:
        flat = flatten_tags({"team": {"infra", "ci"}, "env": {"prod"}})

        assert flat == ("env:prod", "team:ci", "team:infra")

    def test_bare_tag_rendered_as_key(self) -> None:
        assert flatten_tags({"canary": {""}}) == ("canary",)

    def test_empty(self) -> None:
        assert flatten_tags(None) == ()


class TestAssembleTags:
    def test_metadata_and_extra_merged(self) -> None:
        metadata = BuildMetadata(
            run_id="1",
            build_number=1,
            job_name="demo/main",
            tags={"job": {"demo/main"}, "result": {"UNKNOWN"}},
        )

        tags = assemble_tags(metadata, {"team": {"ci"}, "job": {"alias"}})

        assert tags == ("job:alias", "job:demo/main", "result:UNKNOWN", "team:ci")

    def test_missing_metadata_uses_extra_only(self) -> None:
        assert assemble_tags(None, {"team": {"ci"}}) == ("team:ci",)


class TestJobTagsFromPatterns:
    def test_group_references_expanded(self) -> None:
        patterns = [(re.compile(r"(.*?)/(.*)"), ["team:$1", "service:$2"])]

        assert dict(job_tags_from_patterns("payments/api", patterns)) == {
            "team": frozenset({"payments"}),
            "service": frozenset({"api"}),
        }

    def test_pattern_must_match_whole_name(self) -> None:
        patterns = [(re.compile(r"payments"), ["team:payments"])]

        assert dict(job_tags_from_patterns("payments/api", patterns)) == {}

    def test_missing_group_becomes_empty(self) -> None:
        patterns = [(re.compile(r"(a)|(b)"), ["first:$1", "third:$3"])]

        assert dict(job_tags_from_patterns("b", patterns)) == {"first": frozenset({""}), "third": frozenset({""})}

    @pytest.mark.parametrize("job", ["payments/api", "payments/web"])
    def test_all_matching_patterns_contribute(self, job: str) -> None:
        patterns = [
            (re.compile(r"payments/.*"), ["team:payments"]),
            (re.compile(r".*/(.*)"), ["service:$1"]),
        ]

        tags = job_tags_from_patterns(job, patterns)

        assert tags["team"] == frozenset({"payments"})
        assert tags["service"] == frozenset({job.split("/")[1]})
