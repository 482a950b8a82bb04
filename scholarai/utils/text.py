"""Text helpers for shaping AI requests and cleaning replies."""

import re
from typing import Optional

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def truncate(text: str, limit: int) -> str:
    """Return at most the first *limit* characters of *text*."""
    if limit < 0:
        raise ValueError("limit must be non-negative")
    return text[:limit]


def strip_code_fences(response_text: str) -> str:
    """Remove a surrounding ```json ... ``` fence from an LLM reply.

    Some models wrap JSON in markdown fences even when asked for raw JSON.
    """
    return _FENCE_RE.sub("", response_text.strip())


def extract_json_object(response_text: str) -> Optional[str]:
    """Return the outermost ``{...}`` span of *response_text*, or None."""
    cleaned = strip_code_fences(response_text)
    json_start = cleaned.find("{")
    json_end = cleaned.rfind("}")
    if json_start == -1 or json_end <= json_start:
        return None
    return cleaned[json_start:json_end + 1]


def is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()
