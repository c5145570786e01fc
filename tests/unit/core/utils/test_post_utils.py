"""Unit tests for core/utils/slug.py and core/utils/diff.py"""

import pytest

from mdpost.core.utils.diff import diff_summary, unified_diff
from mdpost.core.utils.slug import safe_filename, slugify


@pytest.mark.parametrize("text,expected", [
    ("My First Post", "my-first-post"),
    ("notes_on_python", "notes-on-python"),
    ("  Spaced Out  ", "spaced-out"),
    ("What's new?", "whats-new"),
    ("", ""),
])
def test_slugify(text, expected):
    assert slugify(text) == expected


@pytest.mark.parametrize("name,expected", [
    ("diagram.png", "diagram.png"),
    ("my photo (1).jpg", "my-photo--1-.jpg"),
    ("résumé.pdf", "r-sum-.pdf"),
])
def test_safe_filename(name, expected):
    assert safe_filename(name) == expected


def test_diff_summary_counts_lines():
    stats = diff_summary("a\nb\nc\n", "a\nB\nc\nd\n")
    assert stats == {"added": 2, "deleted": 1, "unchanged": 2}


def test_unified_diff_labels_and_hunks():
    diff = unified_diff("one\ntwo\n", "one\n2\n", "a/post.md", "b/post.md")
    assert diff.startswith("--- a/post.md\n+++ b/post.md\n")
    assert "-two\n" in diff
    assert "+2\n" in diff


def test_unified_diff_identical_is_empty():
    assert unified_diff("same\n", "same\n") == ""
