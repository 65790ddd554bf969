import json
import random

import pytest

from codeleap import generator
from codeleap.errors import AIUnavailableError, AITimeoutError, InvalidApiKeyError, RateLimitedError
from codeleap.fallback_bank import FALLBACK_BANK
from codeleap.generator import (
    TOPICS,
    build_prompt,
    fallback_challenge,
    generate_challenge,
    make_seed,
)
from codeleap.schemas import Difficulty, Language


def _reply(**overrides) -> str:
    payload = {
        "problem": "Is this JavaScript code correct?",
        "code": "const x = 1;\\nconsole.log(x);",
        "codeExplanation": "Logs one.",
        "isCorrect": True,
        "explanation": "Valid code.",
        "additionalInfo": "const is block scoped.",
    }
    payload.update(overrides)
    return "```json\n" + json.dumps(payload) + "\n```"


def test_make_seed_adds_clock() -> None:
    rng = random.Random(7)
    expected = random.Random(7).randrange(1000) + 5000
    assert make_seed(rng, clock_ms=5000) == expected


def test_build_prompt_mentions_topic_and_format() -> None:
    prompt = build_prompt(Language.CSS, Difficulty.HARD, random.Random(1))
    assert any(f'"{t}"' in prompt for t in TOPICS[Language.CSS][Difficulty.HARD])
    assert "Return ONLY a valid JSON object" in prompt
    assert '"isCorrect"' in prompt
    assert "Use advanced concepts and patterns" in prompt


def test_every_pair_has_topics() -> None:
    for language in Language:
        for difficulty in Difficulty:
            assert TOPICS[language][difficulty]


def test_ai_success(monkeypatch) -> None:
    captured = {}

    def fake_chat(messages, api_key, **kw):
        captured["messages"] = messages
        captured["api_key"] = api_key
        return _reply()

    monkeypatch.setattr(generator, "chat", fake_chat)
    resp = generate_challenge(Language.JAVASCRIPT, Difficulty.EASY, "k", random.Random(3))
    assert resp.fallback_used is False
    assert resp.notice is None
    assert resp.challenge.code == "const x = 1;\nconsole.log(x);"
    assert resp.challenge.id.startswith("ai-javascript-easy-")
    assert captured["api_key"] == "k"
    assert [m["role"] for m in captured["messages"]] == ["system", "user"]


@pytest.mark.parametrize(
    "error,notice,rate_limited",
    [
        (RateLimitedError("429"), RateLimitedError.notice, True),
        (AITimeoutError("slow"), AITimeoutError.notice, False),
        (AIUnavailableError("500"), AIUnavailableError.notice, False),
    ],
)
def test_ai_errors_fall_back(monkeypatch, error, notice, rate_limited) -> None:
    def fake_chat(messages, api_key, **kw):
        raise error

    monkeypatch.setattr(generator, "chat", fake_chat)
    resp = generate_challenge(Language.HTML, Difficulty.MEDIUM, "k")
    assert resp.fallback_used is True
    assert resp.is_rate_limit is rate_limited
    assert resp.notice == notice
    assert resp.challenge.id.startswith("fallback-html-medium-")
    assert resp.generation_ms is not None


@pytest.mark.parametrize("content", ["I cannot help with that.", _reply(isCorrect="maybe")])
def test_malformed_reply_falls_back(monkeypatch, content) -> None:
    monkeypatch.setattr(generator, "chat", lambda messages, api_key, **kw: content)
    resp = generate_challenge(Language.CSS, Difficulty.EASY, "k")
    assert resp.fallback_used is True
    assert resp.is_rate_limit is False
    assert resp.notice == AIUnavailableError.notice


def test_invalid_key_is_not_masked(monkeypatch) -> None:
    def fake_chat(messages, api_key, **kw):
        raise InvalidApiKeyError()

    monkeypatch.setattr(generator, "chat", fake_chat)
    with pytest.raises(InvalidApiKeyError):
        generate_challenge(Language.JAVASCRIPT, Difficulty.EASY, "bad")


def test_fallback_challenge_matches_bank_entry() -> None:
    entries = FALLBACK_BANK[Language.JAVASCRIPT][Difficulty.MEDIUM]
    ch = fallback_challenge(Language.JAVASCRIPT, Difficulty.MEDIUM, 4)
    entry = entries[4 % len(entries)]
    assert ch.code == entry.code
    assert ch.is_correct is entry.correct
    assert ch.explanation == entry.explanation


def test_fallback_challenge_with_unknown_inputs() -> None:
    ch = fallback_challenge("cobol", "legendary", 0)
    assert ch.language is Language.JAVASCRIPT
    assert ch.difficulty is Difficulty.EASY
