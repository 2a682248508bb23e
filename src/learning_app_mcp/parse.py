"""Extract JSON and HTML payloads from free-form model output.

Models wrap payloads in commentary and code fences, so both extractors scan
for boundary markers instead of parsing the whole text. The boundaries are
fixed: first ``{`` to last ``}`` for JSON, the ``<!DOCTYPE html>`` marker to
the last closing delimiter for HTML. Prompts are written against exactly
these conventions.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import MalformedResponseError

DOCTYPE_MARKER = "<!DOCTYPE html>"


def _substring(text: str, start: int, end: int) -> str:
    """Slice with JavaScript ``String.prototype.substring`` semantics.

    Negative bounds clamp to 0 and reversed bounds are swapped.
    """
    length = len(text)
    start = min(max(start, 0), length)
    end = min(max(end, 0), length)
    if start > end:
        start, end = end, start
    return text[start:end]


def extract_json(text: str) -> dict[str, Any]:
    """Parse the JSON object spanning the first ``{`` and the last ``}``.

    Raises:
        MalformedResponseError: No brace pair, invalid JSON, or a non-object
            payload.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise MalformedResponseError("Model response did not contain a JSON object")
    try:
        payload = json.loads(text[start : end + 1])
    except json.JSONDecodeError as exc:
        raise MalformedResponseError(f"Model response contained invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedResponseError("Model response JSON was not an object")
    return payload


def extract_html_document(text: str, opener: str, closer: str) -> str:
    """Return the document from ``<!DOCTYPE html>`` up to the last *closer*.

    The end is exclusive of the closer's first character. *opener* is
    accepted for call-site symmetry but never bounds the match. A missing
    doctype marker yields a start of -1, which clamps to the beginning of the
    text; callers check :func:`has_html_document` to reject such responses.
    Never raises.
    """
    start = text.find(DOCTYPE_MARKER)
    end = text.rfind(closer)
    return _substring(text, start, end)


def has_html_document(text: str) -> bool:
    """True when *text* carries the ``<!DOCTYPE html>`` start marker."""
    return DOCTYPE_MARKER in text
