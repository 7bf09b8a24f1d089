# redoc/ai/json_extract.py
"""
JSON object extraction from free-text LLM output.

Chat models often wrap JSON in prose or markdown fences. extract_json_object
finds the first balanced {...} span (string-aware, so braces inside JSON
strings do not count) and parses it. When that span does not parse, the
wider first-"{" to last-"}" slice is tried before giving up.
"""

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class JsonExtraction:
    """Tagged extraction result: either a parsed object or an error message."""

    value: dict[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def find_balanced_object(text: str) -> tuple[int, int] | None:
    """
    Locate the first balanced {...} span.

    Returns:
        (start, end) indices with text[start:end] being the span, or None if
        there is no "{" or the first one is never closed.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if escape:
            escape = False
            continue
        if ch == "\\" and in_string:
            escape = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1
    return None


def _parse_object(candidate: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_json_object(text: str) -> JsonExtraction:
    """
    Extract the first JSON object embedded in text.

    Args:
        text: Raw model output

    Returns:
        JsonExtraction with value set on success, error set otherwise
    """
    if not text or not text.strip():
        return JsonExtraction(error="empty response")

    span = find_balanced_object(text)
    if span is None:
        return JsonExtraction(error="no balanced {...} span in response")

    parsed = _parse_object(text[span[0]:span[1]])
    if parsed is not None:
        return JsonExtraction(value=parsed)

    last = text.rfind("}")
    if last > span[0]:
        parsed = _parse_object(text[span[0]:last + 1])
        if parsed is not None:
            return JsonExtraction(value=parsed)

    preview = text[:200].replace("\n", "\\n")
    return JsonExtraction(error=f"invalid JSON object ({len(text)} chars). Preview: {preview}")
