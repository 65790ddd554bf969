# codeleap/history.py

import json
import logging
from typing import Iterator, List, Optional

from pydantic import TypeAdapter, ValidationError

from .schemas import Challenge, Difficulty, HistoryStats, Language
from .storage import HISTORY_KEY, KeyValueStore

logger = logging.getLogger(__name__)

MAX_HISTORY = 50

_CHALLENGE_LIST = TypeAdapter(List[Challenge])


class ChallengeHistory:
    """Newest-first list of answered challenges, bounded at `capacity`."""

    def __init__(self, capacity: int = MAX_HISTORY):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: List[Challenge] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Challenge]:
        return iter(self._items)

    @property
    def items(self) -> List[Challenge]:
        return list(self._items)

    def add(self, challenge: Challenge) -> None:
        self._items.insert(0, challenge)
        del self._items[self.capacity:]

    def clear(self) -> None:
        self._items.clear()

    def filter(self, language: Optional[Language] = None, difficulty: Optional[Difficulty] = None) -> List[Challenge]:
        return [
            c for c in self._items
            if (language is None or c.language == language)
            and (difficulty is None or c.difficulty == difficulty)
        ]

    def stats(self) -> HistoryStats:
        answered = [c for c in self._items if c.user_answer is not None]
        correct = sum(1 for c in answered if c.user_answer == c.is_correct)
        # half-up rounding, same as the browser's Math.round
        accuracy = (correct * 100 * 2 + len(answered)) // (2 * len(answered)) if answered else 0
        return HistoryStats(
            total=len(self._items),
            answered=len(answered),
            correct=correct,
            incorrect=len(answered) - correct,
            accuracy=accuracy,
            by_difficulty={d.value: sum(1 for c in self._items if c.difficulty == d) for d in Difficulty},
            by_language={lang.value: sum(1 for c in self._items if c.language == lang) for lang in Language},
        )

    # ---------- persistence ----------
    def dumps(self) -> str:
        return json.dumps([c.to_wire() for c in self._items], ensure_ascii=False)

    def save(self, store: KeyValueStore) -> None:
        store.set(HISTORY_KEY, self.dumps())

    @classmethod
    def load(cls, store: KeyValueStore, capacity: int = MAX_HISTORY) -> "ChallengeHistory":
        history = cls(capacity)
        raw = store.get(HISTORY_KEY)
        if not raw:
            return history
        try:
            items = _CHALLENGE_LIST.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding unreadable challenge history (%d errors)", e.error_count())
            return history
        history._items = items[:capacity]
        return history
