# codeleap/generator.py

"""
AI-first challenge generation with a curated fallback.

- One chat call asks for a single JSON challenge on a random topic
- The reply goes through the sanitizer; anything incomplete counts as AI failure
- Any AI failure except a bad key lands on the fallback bank, seeded by the caller's RNG + clock
"""

import logging
import random
import time
from typing import Dict, List, Optional

from .assembler import ORIGIN_AI, ORIGIN_FALLBACK, assemble, now_ms
from .errors import AIUnavailableError, InvalidApiKeyError, RateLimitedError
from .fallback_bank import fallback_payload, resolve_bucket, select_fallback
from .llm import SYSTEM_PROMPT, chat
from .sanitizer import parse_ai_challenge
from .schemas import Challenge, Difficulty, GenerateResponse, Language, language_label

logger = logging.getLogger(__name__)

# ====== Topics per language x difficulty ======
TOPICS: Dict[Language, Dict[Difficulty, List[str]]] = {
    Language.JAVASCRIPT: {
        Difficulty.EASY: ["variables and data types", "basic functions", "arrays", "simple objects", "for loops", "if statements"],
        Difficulty.MEDIUM: ["array methods", "arrow functions", "promises", "destructuring", "classes", "async/await"],
        Difficulty.HARD: ["closures", "prototypes", "recursion", "higher-order functions", "generators", "design patterns"],
    },
    Language.HTML: {
        Difficulty.EASY: ["headings and paragraphs", "links", "images", "lists", "basic elements"],
        Difficulty.MEDIUM: ["forms", "tables", "semantic elements", "input types", "attributes"],
        Difficulty.HARD: ["accessibility", "meta tags", "custom elements", "microdata", "web components"],
    },
    Language.CSS: {
        Difficulty.EASY: ["colors and fonts", "margins and padding", "borders", "basic selectors"],
        Difficulty.MEDIUM: ["flexbox", "grid", "positioning", "transitions", "media queries"],
        Difficulty.HARD: ["animations", "custom properties", "advanced selectors", "performance"],
    },
}

COMPLEXITY: Dict[Difficulty, str] = {
    Difficulty.EASY: "Keep it simple and beginner-friendly",
    Difficulty.MEDIUM: "Include intermediate concepts",
    Difficulty.HARD: "Use advanced concepts and patterns",
}

# share of challenges whose code should be valid
CORRECT_SHARE = 0.4


def make_seed(rng: Optional[random.Random] = None, clock_ms: Optional[int] = None) -> int:
    """Seed for the fallback bank: pseudo-random part plus wall clock, for variety across requests."""
    rng = rng or random
    return rng.randrange(1000) + (clock_ms if clock_ms is not None else now_ms())


# ---------- Prompt builders ----------
def build_prompt(language: Language, difficulty: Difficulty, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    topic = rng.choice(TOPICS[language][difficulty])
    should_be_correct = rng.random() < CORRECT_SHARE
    scenario = rng.randrange(10000)
    lang = language.value
    diff = difficulty.value
    rule = "Make code completely valid" if should_be_correct else "Include ONE realistic error"

    return f"""
Create a unique {diff} {lang} challenge about "{topic}". Scenario #{scenario}.

{COMPLEXITY[difficulty]}. Make it educational and realistic.

Return ONLY a valid JSON object:
{{
  "problem": "Is this {lang} code correct?",
  "code": "your_code_here",
  "codeExplanation": "Brief explanation",
  "isCorrect": {"true" if should_be_correct else "false"},
  "explanation": "Detailed explanation",
  "additionalInfo": "Learning tip"
}}

Rules:
- Use \\n for line breaks
- Escape quotes with \\"
- Focus on "{topic}"
- {rule}
- Keep code concise but complete (max 15 lines)
- Do NOT use backticks anywhere in the response
""".strip()


# ---------- AI path ----------
def request_ai_challenge(
    language: Language,
    difficulty: Difficulty,
    api_key: str,
    rng: Optional[random.Random] = None,
) -> Challenge:
    """Ask the model for one challenge. Raises AIUnavailableError subclasses or InvalidApiKeyError."""
    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt(language, difficulty, rng)},
    ]
    content = chat(messages=messages, api_key=api_key)
    payload = parse_ai_challenge(content)
    return assemble(payload, language, difficulty, ORIGIN_AI)


# ---------- Fallback path ----------
def fallback_challenge(language, difficulty, seed: int) -> Challenge:
    """Curated challenge for (language, difficulty); unusable inputs land on javascript/easy."""
    lang, diff = resolve_bucket(language, difficulty)
    if (lang, diff) != (language, difficulty):
        logger.info("Fallback bucket %s/%s substituted for %r/%r", lang.value, diff.value, language, difficulty)
    entry = select_fallback(lang, diff, seed)
    return assemble(fallback_payload(entry, lang, diff), lang, diff, ORIGIN_FALLBACK)


def fallback_response(
    language,
    difficulty,
    seed: int,
    notice: str,
    rate_limited: bool = False,
    started: Optional[float] = None,
) -> GenerateResponse:
    return GenerateResponse(
        challenge=fallback_challenge(language, difficulty, seed),
        fallback_used=True,
        is_rate_limit=rate_limited,
        notice=notice,
        generation_ms=_elapsed_ms(started),
    )


def _elapsed_ms(started: Optional[float]) -> Optional[int]:
    if started is None:
        return None
    return int((time.monotonic() - started) * 1000)


# ---------- Single generation ----------
def generate_challenge(
    language: Language,
    difficulty: Difficulty,
    api_key: str,
    rng: Optional[random.Random] = None,
) -> GenerateResponse:
    """
    AI path first; on rate limit, timeout, provider error or malformed output,
    the fallback bank. InvalidApiKeyError propagates so the user can fix the key.
    """
    rng = rng or random.Random()
    started = time.monotonic()
    try:
        challenge = request_ai_challenge(language, difficulty, api_key, rng)
    except InvalidApiKeyError:
        raise
    except RateLimitedError as e:
        logger.warning("Rate limited generating %s/%s: %s", language.value, difficulty.value, e)
        return fallback_response(language, difficulty, make_seed(rng), e.notice, rate_limited=True, started=started)
    except AIUnavailableError as e:
        logger.warning("AI unavailable for %s/%s: %s", language.value, difficulty.value, e)
        return fallback_response(language, difficulty, make_seed(rng), e.notice, started=started)
    except ValueError as e:
        # assembler refused the payload
        logger.warning("AI payload rejected for %s/%s: %s", language.value, difficulty.value, e)
        return fallback_response(language, difficulty, make_seed(rng), AIUnavailableError.notice, started=started)

    logger.info("Generated %s %s challenge %s", difficulty.value, language_label(language), challenge.id)
    return GenerateResponse(challenge=challenge, generation_ms=_elapsed_ms(started))
