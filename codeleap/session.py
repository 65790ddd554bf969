# codeleap/session.py

"""
Single-user quiz controller.

Owns what the browser script kept in globals: the current challenge, the
history, the API key and theme (both via the store), and the generation flag.
Runs on one event loop; the AI call is the only thing that suspends.
"""

import asyncio
import logging
import os
import random
import time
from enum import Enum
from typing import Callable, Optional

from .errors import AITimeoutError, AIUnavailableError, InvalidApiKeyError, RateLimitedError
from .generator import fallback_response, make_seed, request_ai_challenge
from .history import MAX_HISTORY, ChallengeHistory
from .llm import validate_key
from .schemas import Challenge, Difficulty, GenerateResponse, Language
from .storage import API_KEY_KEY, THEME_KEY, KeyValueStore

logger = logging.getLogger(__name__)

SESSION_TIMEOUT = float(os.getenv("SESSION_TIMEOUT_S", "35"))

THEMES = ("light", "dark")

AIRequester = Callable[[Language, Difficulty, str], Challenge]
KeyValidator = Callable[[str], tuple]


class SessionState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    AWAITING_ANSWER = "awaiting_answer"
    SHOWING_RESULT = "showing_result"


class QuizSession:
    def __init__(
        self,
        store: KeyValueStore,
        ai: Optional[AIRequester] = None,
        key_validator: Optional[KeyValidator] = None,
        timeout: float = SESSION_TIMEOUT,
        rng: Optional[random.Random] = None,
        history_capacity: int = MAX_HISTORY,
    ):
        self.store = store
        self.timeout = timeout
        self.rng = rng or random.Random()
        self._ai = ai or (lambda lang, diff, key: request_ai_challenge(lang, diff, key, self.rng))
        self._validate_key = key_validator or validate_key
        self.history = ChallengeHistory.load(store, history_capacity)
        self.current: Optional[Challenge] = None
        self.state = SessionState.IDLE
        self._generation = 0
        self._resting_state = SessionState.IDLE

    # ---------- API key / theme ----------
    @property
    def api_key(self) -> Optional[str]:
        return self.store.get(API_KEY_KEY) or None

    def save_api_key(self, api_key: str) -> tuple:
        """Validate, then persist. Returns (valid, error)."""
        key = (api_key or "").strip()
        if not key:
            return False, "API key is required"
        valid, error = self._validate_key(key)
        if valid:
            self.store.set(API_KEY_KEY, key)
            return True, None
        return False, error or "Invalid API key. Please check your key and try again."

    def clear_api_key(self) -> None:
        self.store.remove(API_KEY_KEY)

    @property
    def theme(self) -> str:
        saved = self.store.get(THEME_KEY)
        return saved if saved in THEMES else "light"

    def toggle_theme(self) -> str:
        new = "dark" if self.theme == "light" else "light"
        self.store.set(THEME_KEY, new)
        return new

    # ---------- generation ----------
    @property
    def is_generating(self) -> bool:
        return self.state == SessionState.GENERATING

    async def generate(self, language: Language, difficulty: Difficulty) -> Optional[GenerateResponse]:
        """
        Produce the next challenge.

        Returns None when ignored: a generation is already in flight, or this one
        was cancelled before it completed. Raises InvalidApiKeyError when there is
        no usable key; every other AI failure becomes a fallback with a notice.
        On timeout the provider request is abandoned, not aborted: it finishes in
        its worker thread and the result is dropped.
        """
        if self.is_generating:
            logger.info("Generation already in flight; request ignored")
            return None
        api_key = self.api_key
        if not api_key:
            raise InvalidApiKeyError("API key is required")

        self._generation += 1
        token = self._generation
        previous_state = self.state
        self._resting_state = previous_state
        self.state = SessionState.GENERATING
        started = time.monotonic()

        try:
            challenge = await asyncio.wait_for(
                asyncio.to_thread(self._ai, language, difficulty, api_key),
                timeout=self.timeout,
            )
            result = GenerateResponse(challenge=challenge, generation_ms=int((time.monotonic() - started) * 1000))
        except InvalidApiKeyError:
            if token == self._generation:
                self.state = previous_state
            raise
        except asyncio.TimeoutError:
            logger.warning("AI generation exceeded %.0fs; using fallback", self.timeout)
            result = self._fallback(language, difficulty, AITimeoutError.notice, started)
        except RateLimitedError as e:
            result = self._fallback(language, difficulty, e.notice, started, rate_limited=True)
        except AIUnavailableError as e:
            logger.warning("AI generation failed: %s", e)
            result = self._fallback(language, difficulty, e.notice, started)
        except ValueError as e:
            logger.warning("AI payload rejected: %s", e)
            result = self._fallback(language, difficulty, AIUnavailableError.notice, started)
        except asyncio.CancelledError:
            if token == self._generation:
                self.state = previous_state
            raise
        except Exception:
            logger.exception("Unexpected error during AI generation; using fallback")
            result = self._fallback(language, difficulty, AIUnavailableError.notice, started)

        if token != self._generation:
            logger.info("Discarding result of abandoned generation #%d", token)
            return None

        self.current = result.challenge
        self.state = SessionState.AWAITING_ANSWER
        return result

    def _fallback(self, language, difficulty, notice, started, rate_limited=False) -> GenerateResponse:
        return fallback_response(
            language, difficulty, make_seed(self.rng), notice, rate_limited=rate_limited, started=started,
        )

    def cancel(self) -> bool:
        """Abandon the in-flight generation; its late result will be discarded."""
        if not self.is_generating:
            return False
        self._generation += 1
        self.state = self._resting_state
        return True

    # ---------- answers ----------
    def answer(self, user_answer: bool) -> Optional[Challenge]:
        """Record the first answer on the current challenge. Later answers are ignored (None)."""
        if self.current is None or self.is_generating:
            return None
        if not self.current.record_answer(user_answer):
            logger.info("Challenge %s already answered; ignoring", self.current.id)
            return None
        self.history.add(self.current)
        self.history.save(self.store)
        self.state = SessionState.SHOWING_RESULT
        return self.current

    def clear_history(self) -> None:
        self.history.clear()
        self.history.save(self.store)
