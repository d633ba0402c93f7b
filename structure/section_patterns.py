"""
structure/section_patterns.py — regex patterns recognising section headings.

Each SectionPattern holds:
  - regex        : compiled pattern, matched against a stripped line
  - level        : SectionLevel produced on a match
  - number_group : group with the section number (0 = no number)
  - text_group   : group with the heading text

Patterns are tried in order; the first match wins. ROMAN is tested before
ARABIC so that "IV. ..." can never be read as a numbered item.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from data_model import SectionLevel


@dataclass(frozen=True, slots=True)
class SectionPattern:
    regex: re.Pattern[str]
    level: SectionLevel
    number_group: int
    text_group: int


@dataclass(frozen=True, slots=True)
class SectionMatch:
    level: SectionLevel
    number: str
    text: str


def _p(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.UNICODE)


# "Điều 1. Phê duyệt ..."
DIEU_RE = _p(r"^Điều\s+(\d+)\.\s*(.+)$")

PATTERNS: list[SectionPattern] = [
    SectionPattern(regex=DIEU_RE, level=SectionLevel.DIEU, number_group=1, text_group=2),

    # "IV. Định hướng phát triển", I..XXXIX. The lookahead forbids an empty numeral
    SectionPattern(
        regex=_p(r"^((?=[IVX])X{0,3}(?:IX|IV|V?I{0,3}))\.\s+(.+)$"),
        level=SectionLevel.ROMAN,
        number_group=1,
        text_group=2,
    ),

    # "2. Mục tiêu cụ thể"
    SectionPattern(
        regex=_p(r"^(\d+)\.\s+(.+)$"),
        level=SectionLevel.ARABIC,
        number_group=1,
        text_group=2,
    ),

    # "a) Về kinh tế", "đ) ..."
    SectionPattern(
        regex=_p(r"^([a-zđ])\)\s+(.+)$"),
        level=SectionLevel.LETTER,
        number_group=1,
        text_group=2,
    ),

    # "- Tỷ lệ ...", "+ ...", "– ..."
    SectionPattern(
        regex=_p(r"^[-+–]\s+(.+)$"),
        level=SectionLevel.DASH,
        number_group=0,
        text_group=1,
    ),
]


def match_line(stripped: str) -> SectionMatch | None:
    """Returns the first heading match for a stripped line, or None."""
    for pat in PATTERNS:
        m = pat.regex.match(stripped)
        if m:
            number = m.group(pat.number_group) if pat.number_group else ""
            return SectionMatch(level=pat.level, number=number, text=m.group(pat.text_group).strip())
    return None


# ---------------------------------------------------------------------------
# Document boundaries
# ---------------------------------------------------------------------------

# End of the preamble in Nghị quyết / Quyết định documents (line included).
PREAMBLE_END_MARKERS: tuple[str, ...] = (
    "QUYẾT NGHỊ:",
    "QUYẾT ĐỊNH:",
)

# Start of the signature block after the last Điều (upper-cased line prefix).
SIGNATURE_MARKERS: tuple[str, ...] = (
    "PHỤ LỤC",
    "CHỦ TỊCH",
    "TM.",
    "NƠI NHẬN:",
    "KT.",
)
