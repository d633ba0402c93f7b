"""
structure — section structure parser for Vietnamese plan documents.

Public API:
  parse_structure(text)           -> ParsedDocument
  flatten_sections(sections)      -> list[FlatSection]
  collect_leaf_sections(sections) -> list[Section]
  count_by_level(sections)        -> dict[SectionLevel, int]
  pretty_print(doc)               -> str
  meaningful_text_length(text)    -> int
  normalize_text(text)            -> str
"""

from .parser import (
    parse_structure,
    flatten_sections,
    collect_leaf_sections,
    count_by_level,
    pretty_print,
)
from .text_cleaner import meaningful_text_length, normalize_text, strip_page_markers

__all__ = [
    "parse_structure",
    "flatten_sections",
    "collect_leaf_sections",
    "count_by_level",
    "pretty_print",
    "meaningful_text_length",
    "normalize_text",
    "strip_page_markers",
]
