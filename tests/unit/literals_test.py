"""Tests for loose TypeScript literal parsing."""

import pytest

from subql_migrate.errors import CallerContractViolation, UnsupportedLiteralError
from subql_migrate.manifest.literals import parse_loose_literal


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("'a'", "a"),
        ('"https://eth.api.onfinality.io/public"', "https://eth.api.onfinality.io/public"),
        ("['a', 'b']", ["a", "b"]),
        ('["a", "b",]', ["a", "b"]),
        ("[\n  'a',\n  \"b\",\n]", ["a", "b"]),
        ("[]", []),
        ("42", 42),
        ("-1", -1),
        ("1.5", 1.5),
        ("0x10", 16),
        ("true", True),
        ("false", False),
        ("null", None),
        ("[['a'], 'b']", [["a"], "b"]),
        ("'it\\'s'", "it's"),
        ("''", ""),
    ],
    ids=[
        "single-quoted",
        "double-quoted",
        "array",
        "trailing-comma",
        "multiline",
        "empty-array",
        "int",
        "negative",
        "float",
        "hex",
        "true",
        "false",
        "null",
        "nested",
        "escaped-quote",
        "empty-string",
    ],
)
def test_parses_literal(text: str, expected: object) -> None:
    """Test parsing supported literal forms."""
    assert parse_loose_literal(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("'\\u0041'", "A"),
        ("'\\u{1F600}'", "\U0001f600"),
        ("'\\uD83D\\uDE00'", "\U0001f600"),
        ("'\\x41'", "A"),
        ("'a\\nb'", "a\nb"),
        ("'\\101'", "A"),
    ],
    ids=["unicode", "unicode-braces", "surrogate-pair", "hex", "newline", "octal"],
)
def test_decodes_escapes(text: str, expected: str) -> None:
    """Test that escape sequences decode to their characters."""
    assert parse_loose_literal(text) == expected


def test_comment_inside_array_is_ignored() -> None:
    """Test that comments between array items are skipped."""
    assert parse_loose_literal("['a', // first\n 'b']") == ["a", "b"]


@pytest.mark.parametrize("text", ["someVariable", "process.env.ENDPOINT", "{a: 1}", "['a', b]"])
def test_rejects_non_literal_values(text: str) -> None:
    """Test that identifiers and objects are rejected."""
    with pytest.raises(UnsupportedLiteralError):
        parse_loose_literal(text)


def test_rejects_malformed_input() -> None:
    """Test that input with syntax errors is rejected."""
    with pytest.raises(CallerContractViolation, match="Unable to parse literal"):
        parse_loose_literal("['a', ")
