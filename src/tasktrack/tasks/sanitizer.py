# src/tasktrack/tasks/sanitizer.py

"""
Input sanitization.

Pure string functions applied to anything a caller wants to store. Every
sanitize_* function is idempotent: sanitize(sanitize(x)) == sanitize(x).
Length/business rules are checked separately by the validator.
"""

from __future__ import annotations

import html
import re
import unicodedata

DESCRIPTION_CEILING = 500
CATEGORY_MAX_LENGTH = 50
MAX_ID = 2**31 - 1

# Only real tags ("<b>", "</p>", "<!-- x -->"); a bare "<" in prose is left to _ANGLE_RE.
_TAG_RE = re.compile(r"</?[A-Za-z!][^>]*>")
_ANGLE_RE = re.compile(r"[<>]")
_WS_RE = re.compile(r"\s+")
_CATEGORY_DISALLOWED_RE = re.compile(r"[^A-Za-z0-9 \-]")
_SPACES_RE = re.compile(r" {2,}")


def _strip_controls(text: str) -> str:
    # Keep whitespace controls (\t, \n, ...) so the collapse step turns them into spaces.
    return "".join(
        ch for ch in text if ch.isspace() or unicodedata.category(ch) not in ("Cc", "Cf")
    )


def sanitize_text(text: str | None) -> str:
    if not text:
        return ""
    text = _TAG_RE.sub("", text)
    text = _ANGLE_RE.sub("", text)
    text = _strip_controls(text)
    text = _WS_RE.sub(" ", text)
    return text.strip()


def sanitize_description(text: str | None) -> str:
    text = sanitize_text(text)
    if len(text) > DESCRIPTION_CEILING:
        text = text[:DESCRIPTION_CEILING].rstrip()
    return text


def sanitize_category(text: str | None) -> str:
    text = sanitize_text(text)
    text = _CATEGORY_DISALLOWED_RE.sub("", text)
    text = _SPACES_RE.sub(" ", text).strip()
    if len(text) > CATEGORY_MAX_LENGTH:
        text = text[:CATEGORY_MAX_LENGTH].rstrip()
    return text


def sanitize_for_display(text: str | None) -> str:
    """HTML-escape and turn line breaks into <br /> (for rendering, never for storage)."""
    if not text:
        return ""
    escaped = html.escape(text)
    return escaped.replace("\r\n", "<br />").replace("\n", "<br />")


def is_valid_id(task_id: int) -> bool:
    return 0 < task_id < MAX_ID


def contains_markup(text: str | None) -> bool:
    return bool(text) and _TAG_RE.search(text) is not None
