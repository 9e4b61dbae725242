"""Locate the JSON object payload inside a free-form model reply.

Models are told to answer with bare JSON but regularly wrap it in prose or
markdown fences. The scan below walks the text once:

- outside an object, only ``{`` is significant (quotes and apostrophes in
  prose are ignored);
- inside an object, brace depth is tracked and JSON string literals are
  skipped (honouring backslash escapes), so braces in Tamil or English text
  never close the object early.

The first span whose depth returns to zero is the candidate. A second balanced
top-level object anywhere after it makes the reply ambiguous and is rejected
rather than guessed at.
"""

from __future__ import annotations

from typing import Iterator

from app.core.errors import ExtractionError


def _iter_object_spans(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` for each balanced top-level ``{...}`` span."""
    depth = 0
    start = -1
    in_string = False
    escaped = False

    for i, ch in enumerate(text):
        if depth == 0:
            if ch == "{":
                depth = 1
                start = i
            continue

        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                yield start, i + 1


def extract_json_object(text: str | None) -> str:
    """Return the single JSON object substring embedded in ``text``.

    Raises ``ExtractionError`` when there is no balanced object, or when more
    than one balanced top-level object is present.
    """
    if not text or "{" not in text:
        raise ExtractionError(detail="reply contains no '{'")

    spans = _iter_object_spans(text)
    first = next(spans, None)
    if first is None:
        raise ExtractionError(detail="opening brace is never balanced")

    if next(spans, None) is not None:
        raise ExtractionError(
            "The AI response contained more than one JSON object.",
            detail="multiple top-level objects in reply",
        )

    start, end = first
    return text[start:end]
