"""
kpi/numbers.py — Vietnamese number notation.

Vietnamese conventions:
  - dot (.)   = thousands separator: "7.500"    → 7500
  - comma (,) = decimal separator:   "6,5"      → 6.5
  - mixed:                           "1.234,56" → 1234.56

A bare "X.YYY" (1–3 digits, dot, exactly 3 digits) is read as a grouped
integer. Government documents almost always mean thousands there; a
genuine decimal written with three fractional digits ("6.500" for 6.5)
is misread as 6500. This is a known precision risk, kept on purpose.

Public API:
  parse_vietnamese_number(raw)    -> float | int | None
  parse_international_number(raw) -> float | int | None
  parse_table_number(raw)         -> float | int | None
  parse_inline_number(raw)        -> float | int | None
"""

from __future__ import annotations

import re

type Number = int | float

_INTEGER_RE       = re.compile(r"^-?\d+$")
_VI_GROUPED_RE    = re.compile(r"^-?\d{1,3}(?:\.\d{3})+(?:,\d+)?$")
_VI_DECIMAL_RE    = re.compile(r"^-?\d+,\d+$")
_DOT_DECIMAL_RE   = re.compile(r"^-?\d+\.\d+$")
_INTL_GROUPED_RE  = re.compile(r"^-?\d{1,3}(?:,\d{3})*(?:\.\d+)?$")
_LEADING_NUMBER_RE = re.compile(r"^(-?\d[\d.,]*)")


def parse_vietnamese_number(raw: str) -> Number | None:
    """
    Parses a Vietnamese-formatted numeral; None when it is not a number.

    Rules, first match wins:
      1. "-?123"             → int
      2. "1.234.567[,89]"    → dots dropped, comma → decimal point
      3. "6,5"               → comma → decimal point
      4. "6.5" / "7.500"     → decimal, except X.YYY which is read as thousands
    """
    s = raw.strip()
    if not s:
        return None

    if _INTEGER_RE.match(s):
        return int(s)

    if _VI_GROUPED_RE.match(s):
        return float(s.replace(".", "").replace(",", "."))

    if _VI_DECIMAL_RE.match(s):
        return float(s.replace(",", "."))

    if _DOT_DECIMAL_RE.match(s):
        whole, frac = s.lstrip("-").split(".")
        if len(frac) == 3 and len(whole) <= 3:
            return float(s.replace(".", ""))
        return float(s)

    return None


def parse_international_number(raw: str) -> Number | None:
    """"1,234,567" / "1,234.56" (comma = thousands, dot = decimal)."""
    s = raw.strip()
    if not s:
        return None
    if _INTEGER_RE.match(s):
        return int(s)
    if _INTL_GROUPED_RE.match(s):
        return float(s.replace(",", ""))
    return None


def parse_table_number(raw: str) -> Number | None:
    """
    Cell coercion for appendix tables: Vietnamese notation first, then the
    international one (tables are sometimes pasted from other sources).
    """
    value = parse_vietnamese_number(raw)
    if value is None:
        value = parse_international_number(raw)
    return value


def parse_inline_number(raw: str) -> Number | None:
    """
    Reads the leading numeral of a text fragment ("7,0%/năm" → 7.0).

    Trailing separators left by sentence punctuation ("1.000." / "50,") are
    dropped before parsing.
    """
    m = _LEADING_NUMBER_RE.match(raw.strip())
    if not m:
        return None
    return parse_vietnamese_number(m.group(1).rstrip(".,"))
