"""Suggested-question marker embedded at the end of chat replies.

Replies end with ``<!--QUESTIONS:["...", "...", "..."]-->``. The marker is
removed from displayed text and its JSON array kept separately.
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

MARKER_PREFIX = "<!--QUESTIONS:"
MARKER_SUFFIX = "-->"


def extract_suggested_questions(text: str) -> Tuple[str, Optional[List[str]]]:
    """Split a finished reply into display content and suggested questions.

    A missing or malformed marker leaves ``text`` untouched and returns ``None``.
    """
    start = text.rfind(MARKER_PREFIX)
    if start == -1:
        return text, None
    body = text[start + len(MARKER_PREFIX) :].rstrip()
    if not body.endswith(MARKER_SUFFIX):
        return text, None

    try:
        questions = json.loads(body[: -len(MARKER_SUFFIX)])
    except json.JSONDecodeError as exc:
        logger.warning(f"Ignoring malformed questions marker: {exc}")
        return text, None

    if not isinstance(questions, list) or not all(isinstance(q, str) for q in questions):
        logger.warning("Ignoring questions marker that is not a list of strings")
        return text, None

    return text[:start].rstrip(), questions


def strip_partial_marker(text: str) -> str:
    """Hide a marker that is still streaming in, complete or not."""
    start = text.rfind(MARKER_PREFIX)
    if start != -1:
        return text[:start].rstrip()

    # The tail may be the first few characters of the marker.
    for size in range(min(len(MARKER_PREFIX) - 1, len(text)), 0, -1):
        if text.endswith(MARKER_PREFIX[:size]):
            return text[:-size].rstrip()
    return text
