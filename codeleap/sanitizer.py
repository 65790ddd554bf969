# codeleap/sanitizer.py

"""
Best-effort recovery of a JSON challenge from free-form model output.

Models wrap JSON in markdown fences, add chatty preambles, and double-escape the
code field. sanitize() narrows the text down to the outermost {...} span;
parse_ai_challenge() parses it and refuses anything incomplete, so the caller
either gets a full payload or a MalformedResponseError (-> fallback bank).
"""

import json
import logging
import re
from typing import Any, Dict

from .errors import MalformedResponseError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[\w+-]*")
_CODE_ESCAPE_RE = re.compile(r"\\([ntr\"'\\])")
_CODE_ESCAPES = {
    "n": "\n",
    "t": "  ",
    "r": "",
    '"': '"',
    "'": "'",
    "\\": "\\",
}

REQUIRED_TEXT_FIELDS = ("problem", "code")


def sanitize(text: str) -> str:
    cleaned = _FENCE_RE.sub("", text or "").strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        return cleaned
    return cleaned[start:end + 1]


def unescape_code(code: str) -> str:
    # single pass, so an escaped backslash followed by "n" stays a backslash and an "n"
    return _CODE_ESCAPE_RE.sub(lambda m: _CODE_ESCAPES[m.group(1)], code)


def _coerce_verdict(payload: Dict[str, Any]) -> bool:
    for key in ("isCorrect", "is_correct", "correct"):
        v = payload.get(key)
        if isinstance(v, bool):
            return v
        if isinstance(v, str) and v.strip().lower() in ("true", "false"):
            return v.strip().lower() == "true"
    raise MalformedResponseError("AI response has no boolean isCorrect")


def parse_ai_challenge(content: str) -> Dict[str, Any]:
    """Sanitize + parse + validate. Returns a raw payload for the assembler."""
    if not content or not content.strip():
        raise MalformedResponseError("No content received from AI")

    cleaned = sanitize(content)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.debug("Unparseable AI content: %r", content)
        raise MalformedResponseError(f"Failed to parse AI response: {e.msg}") from e
    except RecursionError as e:
        raise MalformedResponseError("AI response is nested too deeply") from e

    if not isinstance(payload, dict):
        raise MalformedResponseError("AI response is not a JSON object")

    for field in REQUIRED_TEXT_FIELDS:
        v = payload.get(field)
        if not isinstance(v, str) or not v.strip():
            raise MalformedResponseError(f"AI response is missing '{field}'")

    payload["isCorrect"] = _coerce_verdict(payload)
    payload["code"] = unescape_code(payload["code"])
    return payload
