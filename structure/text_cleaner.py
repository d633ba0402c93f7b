"""
structure/text_cleaner.py — normalisation of extracted document text.

What we change:
  - Unicode form → NFC (some decoders emit decomposed Vietnamese diacritics)
  - Windows line endings and non-breaking spaces

What we measure:
  - "meaningful" length: text without page markers ("-- 3 of 43 --") and
    with whitespace collapsed; scanned PDFs yield little else
"""

from __future__ import annotations

import re
import unicodedata

# Page marker emitted per page by PDF text layers of scanned documents.
_PAGE_MARKER_RE = re.compile(r"--\s*\d+\s+of\s+\d+\s*--")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """NFC + unified newlines + plain spaces."""
    text = unicodedata.normalize("NFC", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.replace("\u00a0", " ")


def strip_page_markers(text: str) -> str:
    return _PAGE_MARKER_RE.sub("", text)


def meaningful_text_length(text: str) -> int:
    """Length after removing page markers and collapsing whitespace."""
    stripped = _WHITESPACE_RE.sub(" ", strip_page_markers(text)).strip()
    return len(stripped)
