from typing import Callable, Optional

import pytest

from codeleap.assembler import assemble
from codeleap.schemas import Challenge, Difficulty, Language
from codeleap.storage import MemoryStore


@pytest.fixture
def make_challenge() -> Callable[..., Challenge]:
    """Build Challenges with predictable ids and timestamps."""

    def _make(
        i: int = 0,
        language: Language = Language.JAVASCRIPT,
        difficulty: Difficulty = Difficulty.EASY,
        is_correct: bool = True,
        user_answer: Optional[bool] = None,
    ) -> Challenge:
        return Challenge(
            id=f"c{i}",
            problem=f"Problem {i}",
            code=f"console.log({i});",
            code_explanation="Logs a number.",
            language=language,
            difficulty=difficulty,
            is_correct=is_correct,
            explanation="Because.",
            user_answer=user_answer,
            timestamp=1_700_000_000_000 + i,
        )

    return _make


@pytest.fixture
def ai_payload() -> dict:
    return {
        "problem": "Does this log the sum?",
        "code": "let a = 1;\nconsole.log(a + 1);",
        "codeExplanation": "Adds one.",
        "isCorrect": True,
        "explanation": "It logs 2.",
        "additionalInfo": "Numbers add.",
    }


@pytest.fixture
def fake_ai(ai_payload) -> Callable[[Language, Difficulty, str], Challenge]:
    def _ai(language: Language, difficulty: Difficulty, api_key: str) -> Challenge:
        return assemble(ai_payload, language, difficulty, "ai")

    return _ai


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
