# codeleap/assembler.py

import time
import uuid
from typing import Any, Mapping, Optional

from .schemas import Challenge, Difficulty, Language, language_label

ORIGIN_AI = "ai"
ORIGIN_FALLBACK = "fallback"


def now_ms() -> int:
    return int(time.time() * 1000)


def make_challenge_id(origin: str, language: Language, difficulty: Difficulty, ts: int) -> str:
    # millisecond clock alone collides on back-to-back calls; the hex suffix does not
    return f"{origin}-{language.value}-{difficulty.value}-{ts}-{uuid.uuid4().hex[:8]}"


def _text(raw: Mapping[str, Any], key: str) -> Optional[str]:
    v = raw.get(key)
    if isinstance(v, str) and v.strip():
        return v
    return None


def assemble(
    raw: Mapping[str, Any],
    language: Language,
    difficulty: Difficulty,
    origin: str,
    now: Optional[int] = None,
) -> Challenge:
    """
    Normalize a raw payload (AI or bank) into a full Challenge.

    - id and timestamp are assigned here
    - language/difficulty are the requested ones, whatever the payload claims
    - isCorrect/explanation from upstream are never rewritten; isCorrect is required
    - optional texts default to templated sentences so the UI never sees a gap
    """
    ts = now if now is not None else now_ms()

    code = raw.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ValueError("challenge payload has no code")
    is_correct = raw.get("isCorrect")
    if not isinstance(is_correct, bool):
        raise ValueError("challenge payload has no boolean isCorrect")

    raw_ts = raw.get("timestamp")
    timestamp = raw_ts if isinstance(raw_ts, int) and not isinstance(raw_ts, bool) else ts

    label = language_label(language)
    verdict = "correct" if is_correct else "incorrect"

    return Challenge(
        id=make_challenge_id(origin, language, difficulty, ts),
        problem=_text(raw, "problem") or f"Is this {label} code correct?",
        code=code,
        code_explanation=_text(raw, "codeExplanation") or f"This {label} code demonstrates key concepts.",
        language=language,
        difficulty=difficulty,
        is_correct=is_correct,
        explanation=_text(raw, "explanation") or f"This code is {verdict}.",
        additional_info=_text(raw, "additionalInfo") or f"This is a {difficulty.value} {label} example.",
        timestamp=timestamp,
    )
