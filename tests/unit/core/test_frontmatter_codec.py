"""Unit tests for core/frontmatter.py"""

import pytest

from mdpost.core.frontmatter import (
    format_value, normalize_value, parse_document, parse_value, serialize_document,
)


def test_parse_scenario(scenario_text):
    """Quoted strings and quoted list elements are unwrapped; body keeps its leading newline."""
    parsed = parse_document(scenario_text)
    assert parsed.metadata == {"title": "Hi", "tags": ["a", "b"]}
    assert parsed.body == "\nHello **world**\n"


def test_parse_preserves_key_order():
    """Keys come back in header order."""
    parsed = parse_document("---\nz: 1\na: 2\nm: 3\n---\n")
    assert list(parsed.metadata) == ["z", "a", "m"]


@pytest.mark.parametrize("text", [
    "# Just a body\n",
    "",
    "plain text --- with dashes\n",
    " ---\ntitle: x\n---\n",
])
def test_parse_without_header_returns_body_verbatim(text):
    """Text not starting with the delimiter is all body."""
    parsed = parse_document(text)
    assert parsed.metadata == {}
    assert parsed.body == text


@pytest.mark.parametrize("text", [
    "---\ntitle: x\n",
    "---\ntitle: x\nbody without a closing line\n",
    "---",
])
def test_parse_unterminated_header_is_body(text):
    """A header with no closing delimiter degrades to body-only."""
    parsed = parse_document(text)
    assert parsed.metadata == {}
    assert parsed.body == text


def test_parse_drops_malformed_lines():
    """Lines without a colon or with an empty key are ignored."""
    parsed = parse_document("---\ntitle: ok\nno colon here\n: empty key\n\n---\nbody")
    assert parsed.metadata == {"title": "ok"}
    assert parsed.body == "body"


def test_parse_closing_delimiter_at_end_of_text():
    """A closing delimiter with no trailing line break yields an empty body."""
    parsed = parse_document("---\ntitle: x\n---")
    assert parsed.metadata == {"title": "x"}
    assert parsed.body == ""


def test_parse_value_splits_on_first_colon():
    """Colons inside the value are kept."""
    parsed = parse_document('---\nurl: "https://example.com:8080"\n---\n')
    assert parsed.metadata["url"] == "https://example.com:8080"


@pytest.mark.parametrize("raw,expected", [
    ('"Hello"', "Hello"),
    ("Hello", "Hello"),
    ('  spaced  ', "spaced"),
    ('" inner spaces "', " inner spaces "),
    ("true", True),
    ("false", False),
    ('"true"', True),
    ("True", "True"),
    ("[a, b]", ["a", "b"]),
    ("['a', \"b\", , ]", ["a", "b"]),
    ("[]", []),
    ("42", "42"),
    ('""', ""),
])
def test_parse_value(raw, expected):
    """Values are unquoted, then read as list, boolean, or string in that order."""
    assert parse_value(raw) == expected


@pytest.mark.parametrize("value,expected", [
    ("Hi", '"Hi"'),
    (True, "true"),
    (False, "false"),
    (3, "3"),
    (1.5, "1.5"),
    (None, "null"),
    (["a", "b"], '["a", "b"]'),
    ([], "[]"),
    ("two\nlines", '"two lines"'),
])
def test_format_value(value, expected):
    """Each value kind renders as a single header token."""
    assert format_value(value) == expected


def test_format_value_rejects_unknown_types():
    """Values outside the supported kinds raise TypeError."""
    with pytest.raises(TypeError):
        format_value({"nested": "map"})


def test_serialize_layout():
    """Header lines follow mapping order and the body follows the closing delimiter verbatim."""
    text = serialize_document({"title": "Hi", "featured": True, "tags": ["a"]}, "\nBody\n")
    assert text == '---\ntitle: "Hi"\nfeatured: true\ntags: ["a"]\n---\n\nBody\n'


def test_serialize_empty_metadata_still_parses():
    """An empty mapping still emits delimiters and round trips to an empty mapping."""
    text = serialize_document({}, "Body")
    assert text == "---\n---\nBody"
    parsed = parse_document(text)
    assert parsed.metadata == {}
    assert parsed.body == "Body"


ROUND_TRIP_METADATA = [
    {},
    {"title": "Hello, world"},
    {"title": "Hi", "tags": ["a", "b c"], "featured": True, "draft": False},
    {"quote": 'say "hi"', "empty": "", "time": "10:30"},
    {"featuredImage": "./images/cover.png", "publishedAt": "2024-01-05", "tags": []},
]

ROUND_TRIP_BODIES = [
    "",
    "\nHello **world**\n",
    "no trailing newline",
    "---\nlooks like a header\n---\n",
    "\n\n# Title\n\n- a\n- b\n",
]


@pytest.mark.parametrize("metadata", ROUND_TRIP_METADATA)
@pytest.mark.parametrize("body", ROUND_TRIP_BODIES)
def test_round_trip(metadata, body):
    """parse(serialize(m, b)) gives back m and b."""
    parsed = parse_document(serialize_document(metadata, body))
    assert parsed.metadata == metadata
    assert list(parsed.metadata) == list(metadata)
    assert parsed.body == body


def test_reserialize_is_semantically_stable(scenario_text):
    """Re-serializing a parsed document reproduces the same metadata."""
    first = parse_document(scenario_text)
    again = parse_document(serialize_document(first.metadata, first.body))
    assert again.metadata == first.metadata
    assert again.body == first.body


@pytest.mark.parametrize("value, expected", [
    ("line one\nline two", "line one line two"),
    ("plain", "plain"),
    (True, True),
    (7, "7"),
    (None, "null"),
    (("a", "b"), ["a", "b"]),
])
def test_normalize_value(value, expected):
    """normalize_value gives what a serialize/parse round trip would store."""
    assert normalize_value(value) == expected
    assert parse_document(serialize_document({"k": value}, "")).metadata["k"] == expected


def test_normalize_value_rejects_unknown_types():
    with pytest.raises(TypeError):
        normalize_value({"nested": 1})
