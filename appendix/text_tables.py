"""
appendix/text_tables.py — appendices from plain extracted text.

Layout handled:

    PHỤ LỤC II
    DANH MỤC DỰ ÁN ƯU TIÊN
    (Kèm theo Nghị quyết số 81/2023/QH15)

    STT | Tên dự án            | Địa điểm
    ----+----------------------+---------
    1   | Cao tốc Bắc - Nam    | Toàn quốc

Table rows are lines with a pipe, a tab, or a gap of 2+ spaces. The first
one is the header row; the rest are data rows. Separator lines are skipped.
"""

from __future__ import annotations

import logging
import re

from appendix.classify import classify_appendix_type
from appendix.headers import find_headers, parse_appendix_number
from appendix.rows import build_rows, make_columns
from data_model import Appendix, AppendixRow
from structure.text_cleaner import normalize_text

log = logging.getLogger(__name__)

_MAX_TITLE_LINES = 6
_BODY_HINT_LINES = 5

_GAP_RE       = re.compile(r"\s{2,}")
_SEPARATOR_RE = re.compile(r"^[\s|+\-:=]+$")


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

def is_table_row(line: str) -> bool:
    s = line.strip()
    if not s:
        return False
    return "|" in s or "\t" in s or _GAP_RE.search(s) is not None


def is_separator(line: str) -> bool:
    s = line.strip()
    return len(s) > 2 and _SEPARATOR_RE.match(s) is not None


def split_row(line: str) -> list[str]:
    s = line.strip()
    if "|" in s:
        cells = [c.strip() for c in s.split("|")]
        if cells and cells[0] == "":
            cells = cells[1:]
        if cells and cells[-1] == "":
            cells = cells[:-1]
        return cells
    if "\t" in s:
        return [c.strip() for c in s.split("\t")]
    return [c.strip() for c in _GAP_RE.split(s)]


# ---------------------------------------------------------------------------
# Appendix span
# ---------------------------------------------------------------------------

def _starts_table(line: str) -> bool:
    return "|" in line or "\t" in line or (is_table_row(line) and line[:1].isdigit())


def _title_block(lines: list[str]) -> tuple[str, int]:
    """
    Title lines from the top of the span and the index where the body starts.

    Stops at a blank line once something was collected, at a table-like
    line, after a line closing a parenthesis, or after six lines.
    """
    parts: list[str] = []
    idx = 0
    while idx < len(lines):
        line = lines[idx].strip()
        if not line:
            if parts:
                break
            idx += 1
            continue
        if _starts_table(line) or is_separator(line):
            break
        parts.append(line)
        idx += 1
        if line.endswith(")") or len(parts) >= _MAX_TITLE_LINES:
            break
    return re.sub(r"\s+", " ", " ".join(parts)).strip(), idx


def _parse_table(lines: list[str]) -> tuple[list[str], list[AppendixRow]]:
    table_lines = [
        ln.strip() for ln in lines
        if ln.strip() and not is_separator(ln) and is_table_row(ln)
    ]
    if not table_lines:
        return [], []
    columns = make_columns(split_row(table_lines[0]))
    return columns, build_rows(columns, (split_row(ln) for ln in table_lines[1:]))


def parse_appendices(text: str) -> list[Appendix]:
    """All "PHỤ LỤC" tables in the text, in document order."""
    text = normalize_text(text)
    headers = find_headers(text)
    results: list[Appendix] = []

    for i, header in enumerate(headers):
        span_end = headers[i + 1].start if i + 1 < len(headers) else len(text)
        # rest of the header line ("PHỤ LỤC I: DANH MỤC ...") opens the title
        lines = text[header.end:span_end].split("\n")

        title, body_start = _title_block(lines)
        body = lines[body_start:]
        columns, rows = _parse_table(body)

        number = parse_appendix_number(header.identifier, i + 1)
        hint = " ".join(ln.strip() for ln in body[:_BODY_HINT_LINES])
        results.append(
            Appendix(
                appendix_number=number,
                title_vi=title or f"Phụ lục {number}",
                appendix_type=classify_appendix_type(title, hint),
                columns=columns,
                rows=rows,
                sort_order=i + 1,
            )
        )
        log.debug("Appendix %d: %d columns, %d rows", number, len(columns), len(rows))

    return results
