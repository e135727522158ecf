import json

import pytest

from app.services.devlab_exercises import ExercisesKind, decode_devlab_exercises


@pytest.mark.parametrize(
    "raw, kind, valid",
    [
        (None, ExercisesKind.missing, False),
        ("", ExercisesKind.text, False),
        ("Write a loop", ExercisesKind.text, True),
        ("[]", ExercisesKind.items, False),
        ('[{"q": 1}]', ExercisesKind.items, True),
        ([{"q": 1}], ExercisesKind.items, True),
        ({"questions": [{"q": 1}]}, ExercisesKind.document, True),
        ({"html": "<p>ex</p>", "questions": []}, ExercisesKind.document, True),
        ({"metadata": {"v": 1}}, ExercisesKind.document, False),
        ({"metadata": {}, "raw": "x"}, ExercisesKind.document, True),
        (42, ExercisesKind.unsupported, False),
        ("42", ExercisesKind.unsupported, False),
    ],
)
def test_decode_and_validate(raw, kind, valid):
    decoded = decode_devlab_exercises(raw)
    assert decoded.kind is kind
    assert decoded.is_valid is valid


def test_transfer_string_serialization():
    assert decode_devlab_exercises(None).to_transfer_string() == ""
    assert decode_devlab_exercises("Write a loop").to_transfer_string() == "Write a loop"
    assert json.loads(decode_devlab_exercises([{"q": "é"}]).to_transfer_string()) == [{"q": "é"}]
    assert decode_devlab_exercises("42").to_transfer_string() == "42"


def test_stored_json_strings_are_forwarded_verbatim():
    assert decode_devlab_exercises('"hello"').to_transfer_string() == '"hello"'
    stored = '[{"q": "1+1"}]'
    decoded = decode_devlab_exercises(stored)
    assert decoded.value == [{"q": "1+1"}]
    assert decoded.to_transfer_string() == stored
