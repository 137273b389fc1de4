"""Tests for path parsing and slug normalization."""

from __future__ import annotations

import pytest

from cortex.paths import CategoryPath, MemorySlugPath, parse_category_path, parse_memory_path
from cortex.result import ErrorCode
from cortex.slug import assign_sibling_slugs, to_slug
from cortex.tokens import estimate_tokens


class TestCategoryPath:
    def test_empty_string_is_root(self):
        result = parse_category_path("")
        assert result.ok
        assert result.value.is_root
        assert result.value.parent is None

    def test_empty_segments_dropped(self):
        assert parse_category_path("a//b/").value == parse_category_path("a/b").value

    def test_parent_and_name(self):
        path = parse_category_path("project/cortex").value
        assert path.name == "cortex"
        assert path.parent == CategoryPath(("project",))
        assert str(path) == "project/cortex"

    def test_ancestors_end_at_root(self):
        path = CategoryPath(("a", "b", "c"))
        assert path.ancestors() == [
            CategoryPath(("a", "b")),
            CategoryPath(("a",)),
            CategoryPath.root(),
        ]
        assert CategoryPath.root().ancestors() == []

    @pytest.mark.parametrize("raw", ["Project", "a b", "a/../b", "a\\b", "notes.md"])
    def test_invalid_segments(self, raw: str):
        result = parse_category_path(raw)
        assert not result.ok
        assert result.error.code == ErrorCode.INVALID_PATH


class TestMemoryPath:
    def test_parse(self):
        result = parse_memory_path("project/cortex/arch")
        assert result.ok
        assert result.value == MemorySlugPath(CategoryPath(("project", "cortex")), "arch")
        assert str(result.value) == "project/cortex/arch"

    def test_requires_category(self):
        result = parse_memory_path("lonely")
        assert not result.ok
        assert result.error.code == ErrorCode.INVALID_PATH

    def test_empty_rejected(self):
        assert parse_memory_path("").error.code == ErrorCode.INVALID_PATH


class TestSlugify:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Foo", "foo"),
            ("My Notes", "my-notes"),
            ("snake_case_name", "snake-case-name"),
            ("  Trim  me ", "trim-me"),
            ("a--b", "a--b"),
            ("a - b", "a---b"),
            ("-_Edge_-", "edge"),
            ("Ünïcode!", "ncode"),
            ("---", ""),
            ("2024 Plans", "2024-plans"),
        ],
    )
    def test_to_slug(self, name: str, expected: str):
        assert to_slug(name) == expected

    def test_collisions_resolved_in_lexicographic_order(self):
        result = assign_sibling_slugs(["foo", "FOO ", "Foo"])
        assert result.assigned == {"FOO ": "foo", "Foo": "foo-2", "foo": "foo-3"}
        assert result.warnings == [
            "renamed: Foo -> foo-2 (collision)",
            "renamed: foo -> foo-3 (collision)",
        ]

    def test_assignment_is_order_independent(self):
        first = assign_sibling_slugs(["Foo", "foo", "FOO "])
        second = assign_sibling_slugs(["foo", "FOO ", "Foo"])
        assert first.assigned == second.assigned
        assert first.warnings == second.warnings

    def test_empty_normalization_skipped(self):
        result = assign_sibling_slugs(["---", "alpha", "Alpha"])
        assert "---" not in result.assigned
        assert result.assigned == {"Alpha": "alpha", "alpha": "alpha-2"}
        assert result.warnings[0] == "skipped: --- normalizes to empty path"
        assert len(result.warnings) == 2

    def test_suffix_never_reuses_assigned_slug(self):
        result = assign_sibling_slugs(["a-2", "a", "A"])
        assert result.assigned == {"A": "a", "a": "a-2", "a-2": "a-2-2"}

    def test_labels_used_in_warnings(self):
        result = assign_sibling_slugs(["!!"], label={"!!": "project/!!.md"})
        assert result.warnings == ["skipped: project/!!.md normalizes to empty path"]


class TestTokenEstimate:
    def test_blank_is_zero(self):
        assert estimate_tokens("") == 0
        assert estimate_tokens("   \n\t") == 0

    def test_minimum_one(self):
        assert estimate_tokens("a") == 1

    def test_rounds_up(self):
        assert estimate_tokens("abcd") == 1
        assert estimate_tokens("abcde") == 2
        assert estimate_tokens("  abcdefgh  ") == 2
