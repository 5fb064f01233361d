import pytest

from edgeworker.util.json_repair import JsonRepairError, extract_fenced_block, repair_json


def test_json_repair_handles_code_fence_and_single_quotes():
    text = "```json\n{'pass': false, 'reason': 'lint errors in src/app.ts',}\n```"
    parsed = repair_json(text)
    assert parsed["pass"] is False
    assert parsed["reason"] == "lint errors in src/app.ts"


def test_json_repair_extracts_embedded_object():
    text = 'Verdict:\n{"pass": true, "reason": "uses {braces} in text"} trailing'
    parsed = repair_json(text)
    assert parsed == {"pass": True, "reason": "uses {braces} in text"}


def test_json_repair_without_object_raises():
    with pytest.raises(JsonRepairError):
        repair_json('"pass": true')


def test_json_repair_unbalanced_raises():
    with pytest.raises(JsonRepairError):
        repair_json('{"pass": true, "reason": "cut off')


def test_extract_fenced_block():
    assert extract_fenced_block("before\n```json\n{\"a\": 1}\n```\nafter") == '{"a": 1}'
    assert extract_fenced_block("```\n[1, 2]\n```") == "[1, 2]"
    assert extract_fenced_block("no fences here") is None


def test_json_repair_oversized_integer_raises_repair_error():
    with pytest.raises(JsonRepairError):
        repair_json('{"pass": true, "n": ' + "1" * 5000 + "}")
