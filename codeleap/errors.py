# codeleap/errors.py

"""
Exception taxonomy for challenge generation.

Everything under AIUnavailableError is recoverable: the caller swaps in a
curated challenge and shows a non-blocking notice. InvalidApiKeyError is the
one failure that must reach the user, because only they can fix it.
"""


class CodeLeapError(Exception):
    """Base class for all service errors."""


class AIUnavailableError(CodeLeapError):
    """The AI path produced nothing usable (network, status, content)."""

    notice = "AI was slow/unavailable, using curated challenge"


class AITimeoutError(AIUnavailableError):
    notice = "AI is taking too long, using curated challenge"


class RateLimitedError(AIUnavailableError):
    notice = "Rate limit exceeded, using curated challenge"


class MalformedResponseError(AIUnavailableError):
    """Model output could not be turned into a complete challenge."""


class InvalidApiKeyError(CodeLeapError):
    """Missing or rejected API key. Never replaced by a fallback silently."""

    def __init__(self, message: str = "Invalid API key. Please update your API key."):
        super().__init__(message)
