"""
appendix — "PHỤ LỤC" tables of Vietnamese plan documents.

Public API:
  parse_appendices(text)             -> list[Appendix]
  parse_appendices_from_html(html)   -> list[Appendix]
  classify_appendix_type(title, hint) -> AppendixType
  parse_appendix_number(id, fallback) -> int
"""

from .classify import classify_appendix_type, remove_diacritics
from .headers import find_headers, parse_appendix_number, roman_to_int
from .text_tables import parse_appendices, is_table_row, is_separator, split_row
from .html_tables import parse_appendices_from_html, parse_html_table

__all__ = [
    "classify_appendix_type",
    "remove_diacritics",
    "find_headers",
    "parse_appendix_number",
    "roman_to_int",
    "parse_appendices",
    "is_table_row",
    "is_separator",
    "split_row",
    "parse_appendices_from_html",
    "parse_html_table",
]
