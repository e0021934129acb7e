"""Recover JSON payloads from LLM replies."""

from __future__ import annotations

import json
import re
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def extract_json(text: str) -> Any:
    """Parse the JSON object or array embedded in ``text``.

    Handles the usual model artifacts: markdown code fences, prose before
    or after the payload, and trailing commas before a closing bracket.

    Raises
    ------
    ValueError
        If no parseable JSON object or array is found.
    """
    candidate = text.strip()
    fenced = _FENCE_RE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    starts = [i for i in (candidate.find("{"), candidate.find("[")) if i != -1]
    if not starts:
        raise ValueError("No JSON object found in LLM reply")
    start = min(starts)
    closer = "}" if candidate[start] == "{" else "]"
    end = candidate.rfind(closer)
    if end <= start:
        raise ValueError("Unterminated JSON in LLM reply")

    body = _TRAILING_COMMA_RE.sub(r"\1", candidate[start : end + 1])
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON in LLM reply: {e}") from e
