import pytest

from app.services.transcript_normalizer import normalize_transcript


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  hello world  ", "hello world"),
        ("line one\r\nline two\rline three", "line one\nline two\nline three"),
        ("para one\n\n\n\n\npara two", "para one\n\npara two"),
        ("too    many\t\tspaces", "too many spaces"),
        ("bell\x07 and null\x00 chars", "bell and null chars"),
        ("", ""),
    ],
)
def test_normalize_transcript(raw, expected):
    assert normalize_transcript(raw) == expected


@pytest.mark.parametrize("value", [None, 42, ["a"], {"text": "a"}])
def test_non_string_input_yields_empty_string(value):
    assert normalize_transcript(value) == ""


def test_control_character_between_spaces_collapses_fully():
    assert normalize_transcript("a \x00 b") == "a b"


@pytest.mark.parametrize(
    "raw",
    [
        "a \x00 b",
        "x\n\x00\n\n\ny",
        "  \r\n\r\n\r\n text \t\t end \x1f ",
        "plain",
    ],
)
def test_normalization_is_idempotent(raw):
    once = normalize_transcript(raw)
    assert normalize_transcript(once) == once
