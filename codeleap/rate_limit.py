# codeleap/rate_limit.py

import time
from collections import defaultdict, deque
from typing import Callable, Deque, Dict, NamedTuple, Optional


class Decision(NamedTuple):
    allowed: bool
    message: Optional[str] = None
    retry_after: Optional[int] = None


class SlidingWindowLimiter:
    """
    Per-client guard in front of the AI provider, so one browser tab cannot burn
    the shared quota:
    - per-minute window (60s)
    - per-day limit (UTC day)
    A limit of 0 disables that window.
    """

    def __init__(self, max_per_minute: int = 5, max_per_day: int = 50, clock: Callable[[], float] = time.time):
        self.max_per_minute = max_per_minute
        self.max_per_day = max_per_day
        self._clock = clock
        self._minute: Dict[str, Deque[float]] = defaultdict(deque)
        self._daily: Dict[str, Dict[str, int]] = defaultdict(lambda: {"day": "", "count": 0})

    def allow(self, key: str) -> Decision:
        now = self._clock()

        dq = self._minute[key]
        cutoff = now - 60.0
        while dq and dq[0] < cutoff:
            dq.popleft()
        if self.max_per_minute > 0 and len(dq) >= self.max_per_minute:
            retry_after = max(1, int(dq[0] + 60 - now))
            return Decision(
                False,
                f"Limit of {self.max_per_minute} generations per minute reached. Retry in {retry_after}s.",
                retry_after,
            )

        day = time.strftime("%Y-%m-%d", time.gmtime(now))
        rec = self._daily[key]
        if rec["day"] != day:
            rec["day"] = day
            rec["count"] = 0
        if self.max_per_day > 0 and rec["count"] >= self.max_per_day:
            return Decision(False, f"Daily limit of {self.max_per_day} generations reached.", 3600)

        dq.append(now)
        rec["count"] += 1
        return Decision(True)

    def reset(self) -> None:
        self._minute.clear()
        self._daily.clear()
