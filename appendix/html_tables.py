"""
appendix/html_tables.py — appendices from HTML (DOCX rendered to HTML).

Architecture:
  html → BeautifulSoup
  → _stream()        (text runs and <table> tags in document order;
                      block elements end a line)
  → header matching  (same "PHỤ LỤC <id>" rule as the plain-text pipeline)
  → each <table> goes to the header whose span contains it
  → parse_html_table() per table, merged per appendix

Merge rule: a later table with the same columns continues the first one;
a table with different columns is still appended under the first table's
columns (best effort, may misalign cells).

Public API:
  parse_appendices_from_html(html) -> list[Appendix]
  parse_html_table(table)          -> tuple[list[str], list[AppendixRow]]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag

from appendix.classify import classify_appendix_type
from appendix.headers import find_headers, parse_appendix_number
from appendix.rows import build_rows, make_columns, renumber, synthetic_columns
from data_model import Appendix, AppendixRow
from structure.text_cleaner import normalize_text

log = logging.getLogger(__name__)

_MAX_TITLE_CHARS = 2000
_HINT_ROWS       = 3

_NOISE_TAGS = {"script", "style", "noscript", "head"}
_BLOCK_TAGS = {
    "p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "ul", "ol",
    "section", "article", "header", "footer", "blockquote", "body",
}

_WS_RE = re.compile(r"\s+")


@dataclass
class _Span:
    identifier: str | None
    title_parts: list[str] = field(default_factory=list)
    tables: list[Tag] = field(default_factory=list)


# ---------------------------------------------------------------------------
# DOM walk
# ---------------------------------------------------------------------------

def _stream(node: Tag) -> Iterator[str | Tag]:
    """Text pieces and table tags in document order; tables are not entered."""
    for child in node.children:
        if isinstance(child, (Comment, Doctype)):
            continue
        if isinstance(child, NavigableString):
            yield str(child)
        elif isinstance(child, Tag):
            name = child.name
            if name in _NOISE_TAGS:
                continue
            if name == "table":
                yield child
                continue
            if name == "br":
                yield "\n"
                continue
            if name in _BLOCK_TAGS:
                yield "\n"
            yield from _stream(child)
            if name in _BLOCK_TAGS:
                yield "\n"


def _segments(soup: BeautifulSoup) -> list[str | Tag]:
    """Adjacent text pieces joined into one run; tables kept as-is."""
    out: list[str | Tag] = []
    buf: list[str] = []
    for item in _stream(soup):
        if isinstance(item, Tag):
            if buf:
                out.append("".join(buf))
                buf = []
            out.append(item)
        else:
            buf.append(item)
    if buf:
        out.append("".join(buf))
    return out


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

def _cell_text(cell: Tag) -> str:
    return _WS_RE.sub(" ", cell.get_text(" ")).strip()


def _own_rows(table: Tag) -> list[Tag]:
    """<tr> of this table only (nested tables keep their rows)."""
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def parse_html_table(table: Tag) -> tuple[list[str], list[AppendixRow]]:
    """
    Columns and rows of one <table>.

    The first row is the header when it has <th> cells or when more rows
    follow; a lone row without <th> is data under Column_N names.
    """
    trs = _own_rows(table)
    if not trs:
        return [], []

    cell_rows = [[_cell_text(c) for c in tr.find_all(["td", "th"], recursive=False)] for tr in trs]
    has_th = trs[0].find("th", recursive=False) is not None

    if has_th or len(trs) > 1:
        columns = make_columns(cell_rows[0])
        data_rows = cell_rows[1:]
    else:
        columns = synthetic_columns(len(cell_rows[0]))
        data_rows = cell_rows

    return columns, build_rows(columns, data_rows)


def _merge_tables(tables: list[Tag]) -> tuple[list[str], list[AppendixRow]]:
    merged_columns: list[str] = []
    merged_rows: list[AppendixRow] = []

    for table in tables:
        columns, rows = parse_html_table(table)
        if not merged_columns:
            merged_columns, merged_rows = columns, rows
            continue
        if columns != merged_columns:
            log.debug("Merging table with different columns %s into %s", columns, merged_columns)
        merged_rows.extend(renumber(rows, len(merged_rows)))

    return merged_columns, merged_rows


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def _collect_spans(segments: list[str | Tag]) -> list[_Span]:
    spans: list[_Span] = []
    current: _Span | None = None

    for seg in segments:
        if isinstance(seg, Tag):
            if current is not None:
                current.tables.append(seg)
            continue

        text = normalize_text(seg)
        headers = find_headers(text)
        if not headers:
            if current is not None and not current.tables:
                current.title_parts.append(text)
            continue

        if current is not None and not current.tables:
            current.title_parts.append(text[:headers[0].start])
        for i, header in enumerate(headers):
            end = headers[i + 1].start if i + 1 < len(headers) else len(text)
            current = _Span(identifier=header.identifier)
            current.title_parts.append(text[header.end:end])
            spans.append(current)

    return spans


def parse_appendices_from_html(html: str) -> list[Appendix]:
    """All "PHỤ LỤC" appendices of an HTML document, tables merged per appendix."""
    soup = BeautifulSoup(html, "html.parser")
    spans = _collect_spans(_segments(soup))
    results: list[Appendix] = []

    for i, span in enumerate(spans):
        title_raw = "".join(span.title_parts)[:_MAX_TITLE_CHARS]
        title = _WS_RE.sub(" ", title_raw).strip()
        columns, rows = _merge_tables(span.tables)

        number = parse_appendix_number(span.identifier, i + 1)
        hint = " ".join(
            " ".join(str(v) for v in r.data.values()) for r in rows[:_HINT_ROWS]
        )
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
        log.debug("HTML appendix %d: %d tables, %d rows", number, len(span.tables), len(rows))

    return results
