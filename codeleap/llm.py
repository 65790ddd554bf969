# codeleap/llm.py

"""
Chat client for an OpenAI-compatible endpoint (Groq by default) via huggingface_hub.

- The caller supplies the API key per request; nothing is baked in
- Bounded by LLM_TIMEOUT_S; no retries, a slow provider means fallback
- 429 / "rate limit" and 401/403 are mapped to distinct errors
- Robustly extracts content (handles list-of-chunks responses)
"""

import logging
import os
from typing import Any, Dict, List, Optional, Tuple, Union

from dotenv import load_dotenv
from huggingface_hub import InferenceClient, InferenceTimeoutError
from huggingface_hub.utils import HfHubHTTPError, get_session

from .errors import (
    AITimeoutError,
    AIUnavailableError,
    InvalidApiKeyError,
    MalformedResponseError,
    RateLimitedError,
)

load_dotenv()

logger = logging.getLogger(__name__)

LLM_BASE_URL = (os.getenv("LLM_BASE_URL") or "https://api.groq.com/openai/v1").strip().rstrip("/")
DEFAULT_MODEL = (os.getenv("LLM_MODEL") or "llama-3.1-8b-instant").strip()
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT_S", "30"))

SYSTEM_PROMPT = (
    "You are an expert programming instructor who creates educational coding challenges. "
    "Always respond with valid JSON only, no markdown or formatting. Escape strings properly for JSON."
)


def _make_client(api_key: str) -> InferenceClient:
    return InferenceClient(base_url=LLM_BASE_URL, api_key=api_key, timeout=LLM_TIMEOUT)


def _status_of(err: HfHubHTTPError) -> Optional[int]:
    return getattr(getattr(err, "response", None), "status_code", None)


def _map_http_error(err: HfHubHTTPError) -> Exception:
    status = _status_of(err)
    text = str(err)
    if status == 429 or "rate limit" in text.lower():
        return RateLimitedError(f"AI provider rate limit ({status})")
    if status in (401, 403):
        return InvalidApiKeyError()
    return AIUnavailableError(f"AI provider error ({status}): {text[:200]}")


def _flatten_content(content: Union[str, List[Any], None]) -> str:
    """Providers may return a string or a list of chunks; concatenate text fields safely."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    out_parts: List[str] = []
    for chunk in content:
        if isinstance(chunk, str):
            out_parts.append(chunk)
        elif isinstance(chunk, dict):
            # common shapes: {"type":"text","text":"..."} or {"text":"..."}
            out_parts.append(str(chunk.get("text") or ""))
        else:
            out_parts.append(str(chunk))
    return "".join(out_parts)


def _extract_content(resp: Any) -> str:
    """Support both object and dict response shapes."""
    try:
        msg = resp.choices[0].message
        if isinstance(msg, dict):
            return _flatten_content(msg.get("content"))
        return _flatten_content(getattr(msg, "content", ""))
    except (AttributeError, IndexError, TypeError):
        pass

    try:
        return _flatten_content(resp["choices"][0]["message"].get("content"))
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""


def chat(
    messages: List[Dict[str, str]],
    api_key: str,
    temperature: float = 0.7,
    max_tokens: int = 2000,
    top_p: float = 0.9,
    model: str = DEFAULT_MODEL,
) -> str:
    """
    One chat completion. Returns the raw content string.

    Raises RateLimitedError, InvalidApiKeyError, AITimeoutError or AIUnavailableError;
    empty content is reported as MalformedResponseError.
    """
    if not api_key:
        raise InvalidApiKeyError("API key is required")

    client = _make_client(api_key)
    try:
        resp = client.chat_completion(
            messages=messages,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            top_p=top_p,
        )
    except InferenceTimeoutError as e:
        raise AITimeoutError(f"AI provider did not answer within {LLM_TIMEOUT:.0f}s") from e
    except HfHubHTTPError as e:
        mapped = _map_http_error(e)
        logger.warning("Chat completion failed: %s", mapped)
        raise mapped from e
    except Exception as e:
        # transport errors (DNS, TLS, connection reset) surface as library-specific types
        logger.warning("Chat completion failed: %s", e)
        raise AIUnavailableError(f"AI request failed: {e}") from e

    content = _extract_content(resp)
    if not content.strip():
        raise MalformedResponseError("No content received from AI")
    return content


def validate_key(api_key: str) -> Tuple[bool, Optional[str]]:
    """
    Check a key by listing the provider's models.

    Returns (valid, error_message); never raises.
    """
    if not api_key or not api_key.strip():
        return False, "API key is required"

    try:
        resp = get_session().get(
            f"{LLM_BASE_URL}/models",
            headers={"Authorization": f"Bearer {api_key.strip()}"},
            timeout=LLM_TIMEOUT,
        )
    except Exception as e:
        logger.warning("API key validation request failed: %s", e)
        return False, "Failed to validate API key"

    if resp.status_code < 400:
        return True, None

    message = "Invalid API key"
    try:
        body = resp.json()
        message = (body.get("error") or {}).get("message") or message
    except (ValueError, AttributeError):
        pass
    return False, message


def current_model_id() -> str:
    """Expose the configured model id for /health."""
    return DEFAULT_MODEL
