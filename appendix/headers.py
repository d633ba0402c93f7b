"""
appendix/headers.py — "PHỤ LỤC <id>" markers and their numbering.

<id> is a roman numeral, an arabic number or a single letter (A = 1).
A header without a readable id takes its position (1-based) as number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Header must open a line; the id must sit on the same line.
HEADER_RE = re.compile(
    r"^[ \t]*(PH[UỤ]\s*L[UỤ]C)[ \t]*(?:([IVXLCDM]+|[0-9]+|[A-Z])(?:[ \t]*[.:][ \t]*|[ \t]+|(?=\n)|$))?",
    re.IGNORECASE | re.MULTILINE,
)

_ROMAN_VALUES = {"I": 1, "V": 5, "X": 10, "L": 50, "C": 100, "D": 500, "M": 1000}
_ROMAN_RE     = re.compile(r"^[IVXLCDM]+$", re.IGNORECASE)
_LETTER_RE    = re.compile(r"^[A-Z]$", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class AppendixHeader:
    start: int          # offset of the header line
    end: int            # offset just after marker and id
    identifier: str | None


def find_headers(text: str) -> list[AppendixHeader]:
    return [
        AppendixHeader(start=m.start(), end=m.end(), identifier=m.group(2))
        for m in HEADER_RE.finditer(text)
    ]


def roman_to_int(roman: str) -> int:
    total = 0
    values = [_ROMAN_VALUES.get(ch, 0) for ch in roman.upper()]
    for i, current in enumerate(values):
        following = values[i + 1] if i + 1 < len(values) else 0
        total += -current if current < following else current
    return total


def parse_appendix_number(identifier: str | None, fallback: int) -> int:
    """Arabic first, then roman ("IV" → 4), then letter ("B" → 2)."""
    if not identifier:
        return fallback
    ident = identifier.strip()
    if ident.isdigit():
        return int(ident)
    # a lone C, D, L or M is a letter label, not 100 / 500 / 50 / 1000
    if _ROMAN_RE.match(ident) and not (len(ident) == 1 and ident.upper() in "LCDM"):
        return roman_to_int(ident)
    if _LETTER_RE.match(ident):
        return ord(ident.upper()) - ord("A") + 1
    return fallback
