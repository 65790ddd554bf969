import json

import pytest

from codeleap.errors import AIUnavailableError, MalformedResponseError
from codeleap.sanitizer import parse_ai_challenge, sanitize, unescape_code


def test_sanitize_strips_json_fence() -> None:
    assert sanitize('```json\n{"a":1}\n```') == '{"a":1}'


def test_sanitize_strips_bare_fence_and_prose() -> None:
    text = 'Sure! Here it is:\n```\n{"a": {"b": 2}}\n```\nHope it helps.'
    assert sanitize(text) == '{"a": {"b": 2}}'


def test_sanitize_without_braces_returns_trimmed_text() -> None:
    assert sanitize("  no braces here \n") == "no braces here"


def test_sanitize_reversed_braces_returns_trimmed_text() -> None:
    assert sanitize(" } backwards { ") == "} backwards {"


def test_unescape_code_handles_literal_sequences() -> None:
    raw = r'let s = \"hi\";\nconsole.log(s, \'x\');\tdone'
    assert unescape_code(raw) == "let s = \"hi\";\nconsole.log(s, 'x');  done"


def test_unescape_code_escaped_backslash_is_not_a_newline() -> None:
    assert unescape_code(r"a\\nb") == "a\\nb"


def _fenced(payload: dict) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


def test_parse_unescapes_only_the_code_field() -> None:
    payload = {
        "problem": "Is it ok?",
        "code": "let a = 1;\\nconsole.log(a);",
        "isCorrect": False,
        "explanation": "Keep \\n as typed",
    }
    parsed = parse_ai_challenge(_fenced(payload))
    assert parsed["code"] == "let a = 1;\nconsole.log(a);"
    assert parsed["explanation"] == "Keep \\n as typed"
    assert parsed["isCorrect"] is False


def test_parse_keeps_properly_escaped_code() -> None:
    content = json.dumps({"problem": "p", "code": "a();\nb();", "isCorrect": True})
    assert parse_ai_challenge(content)["code"] == "a();\nb();"


@pytest.mark.parametrize(
    "verdict_fields,expected",
    [
        ({"isCorrect": "false"}, False),
        ({"isCorrect": " TRUE "}, True),
        ({"correct": True}, True),
    ],
)
def test_parse_accepts_equivalent_verdicts(verdict_fields: dict, expected: bool) -> None:
    content = json.dumps({"problem": "p", "code": "c", **verdict_fields})
    assert parse_ai_challenge(content)["isCorrect"] is expected


@pytest.mark.parametrize(
    "content",
    [
        "",
        "   ",
        "no braces here",
        "[1, 2, 3]",
        '{"problem": "p", "code": "c", "isCorrect": maybe}',
        json.dumps({"code": "c", "isCorrect": True}),
        json.dumps({"problem": "p", "code": "", "isCorrect": True}),
        json.dumps({"problem": "p", "code": "c"}),
        json.dumps({"problem": "p", "code": "c", "isCorrect": 1}),
        '{"problem": "p", "code": "c", "isCorrect": true, "x": ' + "[" * 100_000 + "]" * 100_000 + "}",
    ],
)
def test_parse_rejects_incomplete_content(content: str) -> None:
    with pytest.raises(MalformedResponseError):
        parse_ai_challenge(content)


def test_malformed_is_an_ai_failure() -> None:
    assert issubclass(MalformedResponseError, AIUnavailableError)
