"""Markup stripping and whitespace normalisation for free-text fields."""

from __future__ import annotations

import re

_BREAK_TAG_PATTERN = re.compile(r"<\s*/?\s*(?:br|p)\b[^>]*>", flags=re.IGNORECASE)
_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Strip HTML markup and collapse whitespace.

    Line-break and paragraph tags (opening or closing) become a space so that
    ``"<p>A</p><br>B"`` reads ``"A B"``; every other tag is dropped.
    """

    if not text:
        return ""
    text = _BREAK_TAG_PATTERN.sub(" ", text)
    text = _TAG_PATTERN.sub("", text)
    return _WHITESPACE_PATTERN.sub(" ", text).strip()
