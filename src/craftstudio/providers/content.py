"""Utilities for normalizing LLM message content across providers.

Some providers (notably Google Gemini) return ``AIMessage.content`` as a list of
content-block dicts rather than a plain string.  This module provides a single
helper to extract readable text regardless of the underlying format, plus the
JSON-locating helpers used when a model wraps its answer in prose or fences.
"""

from __future__ import annotations

import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def extract_text(content: str | list[Any] | None) -> str:
    """Extract plain text from an LLM message content field.

    Handles two formats:
    - ``str``: returned as-is.
    - ``list[dict]``: content blocks (e.g. Gemini).  Text is extracted from
      each block that has ``type == "text"`` and a ``text`` key, then joined
      with newlines. Bare strings inside the list are kept as well.

    Returns an empty string for ``None`` or a list with no text blocks, so
    callers can treat "no text" as an ordinary outcome.
    """
    if content is None:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return "\n".join(parts)

    return str(content)


def strip_code_fence(text: str) -> str:
    """Return the body of the first fenced block, or ``text`` unchanged."""
    match = _FENCE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def find_json_object(text: str) -> str | None:
    """Return the outermost ``{...}`` span in ``text``, or None.

    The span runs from the first ``{`` to the last ``}``, so nested
    objects stay intact.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]
