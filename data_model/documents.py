"""
data_model/documents.py — section tree of a parsed legal/planning document.

Section is one structural unit (Điều, roman part, numbered item, lettered
point or dash bullet); ParsedDocument owns the roots of the tree together
with the preamble and the signature block.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SectionLevel(StrEnum):
    """Nesting levels, outermost first."""
    DIEU   = "DIEU"
    ROMAN  = "ROMAN"
    ARABIC = "ARABIC"
    LETTER = "LETTER"
    DASH   = "DASH"

    @property
    def priority(self) -> int:
        """0 = outermost (Điều), 4 = innermost (dash bullet)."""
        return _PRIORITY[self]


_PRIORITY: dict[SectionLevel, int] = {
    SectionLevel.DIEU:   0,
    SectionLevel.ROMAN:  1,
    SectionLevel.ARABIC: 2,
    SectionLevel.LETTER: 3,
    SectionLevel.DASH:   4,
}


@dataclass(slots=True)
class Section:
    level: SectionLevel
    number: str                 # "1", "IV", "a"; empty for dash bullets
    title: str | None           # None for DASH (text goes to content)
    content: str
    sort_order: int             # unique, increasing across the whole document
    children: list[Section] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Identity used to attach extracted targets, e.g. "ARABIC:2:7"."""
        return f"{self.level}:{self.number}:{self.sort_order}"

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass(slots=True)
class ParsedDocument:
    preamble: str
    sections: list[Section]
    signature_block: str


@dataclass(slots=True)
class FlatSection:
    """Section with its depth in the tree (pre-order flattening)."""
    section: Section
    depth: int
