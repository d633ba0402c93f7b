"""
structure/parser.py — section tree of a Vietnamese legal/planning document.

Architecture:
  raw text → lines
  → _find_preamble_end()   (QUYẾT NGHỊ: / QUYẾT ĐỊNH: inclusive, else first Điều)
  → _find_signature_start() (first signature marker after the last Điều)
  → _build_tree()          (explicit stack of open sections)
  → ParsedDocument

Levels nest DIEU → ROMAN → ARABIC → LETTER → DASH. National resolutions
usually skip ROMAN (Điều → 1. → a) → -); regional and sector decisions use
the full chain. The stack handles both since a heading only closes open
sections at its own level or deeper.

Public API:
  parse_structure(text)        -> ParsedDocument
  flatten_sections(sections)   -> list[FlatSection]
  collect_leaf_sections(sections) -> list[Section]
  pretty_print(doc)            -> str
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from data_model import FlatSection, ParsedDocument, Section, SectionLevel
from structure.section_patterns import (
    DIEU_RE,
    PREAMBLE_END_MARKERS,
    SIGNATURE_MARKERS,
    match_line,
)
from structure.text_cleaner import normalize_text

_PREVIEW_CHARS = 200


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_structure(text: str) -> ParsedDocument:
    """
    Splits the document into preamble, section tree and signature block.

    A document without any Điều has no preamble boundary; its whole body is
    parsed as sections (degraded, but not an error).
    """
    lines = normalize_text(text).split("\n")

    preamble_end = _find_preamble_end(lines)
    signature_start = _find_signature_start(lines, preamble_end)

    preamble = "\n".join(lines[:preamble_end]).strip()
    signature_block = "\n".join(lines[signature_start:]).strip()
    sections = _build_tree(lines[preamble_end:signature_start])

    return ParsedDocument(
        preamble=preamble,
        sections=sections,
        signature_block=signature_block,
    )


def flatten_sections(sections: Iterable[Section], depth: int = 0) -> list[FlatSection]:
    """Pre-order list of all sections with their depth."""
    result: list[FlatSection] = []
    for s in sections:
        result.append(FlatSection(section=s, depth=depth))
        if s.children:
            result.extend(flatten_sections(s.children, depth + 1))
    return result


def collect_leaf_sections(sections: Iterable[Section]) -> list[Section]:
    """Sections without children whose content is not blank, in document order."""
    return [
        flat.section
        for flat in flatten_sections(sections)
        if flat.section.is_leaf and flat.section.content.strip()
    ]


def count_by_level(sections: Iterable[Section]) -> dict[SectionLevel, int]:
    return dict(Counter(flat.section.level for flat in flatten_sections(sections)))


def pretty_print(doc: ParsedDocument) -> str:
    """Indented, human-readable rendering of the tree (for debugging)."""
    out: list[str] = []

    if doc.preamble:
        out.append("=== PREAMBLE ===")
        out.append(_preview(doc.preamble))
        out.append("")

    out.append("=== SECTIONS ===")
    for flat in flatten_sections(doc.sections):
        s = flat.section
        pad = "  " * flat.depth
        num = f" {s.number}" if s.number else ""
        title = f" - {s.title}" if s.title else ""
        size = f" [{len(s.content)} chars]" if s.content else ""
        out.append(f"{pad}[{s.level}{num}]{title}{size}")

    if doc.signature_block:
        out.append("")
        out.append("=== SIGNATURE BLOCK ===")
        out.append(_preview(doc.signature_block))

    return "\n".join(out)


# ---------------------------------------------------------------------------
# Boundaries
# ---------------------------------------------------------------------------

def _find_preamble_end(lines: list[str]) -> int:
    """Index (exclusive) of the last preamble line; 0 when no boundary exists."""
    for i, line in enumerate(lines):
        stripped = line.strip()
        upper = stripped.upper()
        if any(marker in upper for marker in PREAMBLE_END_MARKERS):
            return i + 1
        if DIEU_RE.match(stripped):
            return i
    return 0


def _find_signature_start(lines: list[str], preamble_end: int) -> int:
    """Index of the first signature line after the last Điều; len(lines) if none."""
    last_dieu = -1
    for i in range(len(lines) - 1, preamble_end - 1, -1):
        if DIEU_RE.match(lines[i].strip()):
            last_dieu = i
            break

    if last_dieu == -1:
        return len(lines)

    for i in range(last_dieu + 1, len(lines)):
        upper = lines[i].strip().upper()
        if upper and upper.startswith(SIGNATURE_MARKERS):
            return i
    return len(lines)


# ---------------------------------------------------------------------------
# Tree building
# ---------------------------------------------------------------------------

def _build_tree(body: list[str]) -> list[Section]:
    """
    Turns body lines into a section tree.

    The stack holds the currently open sections, outermost first. A heading at
    level L closes every open section of priority >= L; the remaining top is
    its parent. Non-heading lines extend the innermost open section; orphan
    lines (empty stack) are dropped.
    """
    roots: list[Section] = []
    stack: list[Section] = []
    sort_order = 0

    for line in body:
        stripped = line.strip()
        if not stripped:
            continue

        m = match_line(stripped)
        if m is None:
            if stack:
                _append_content(stack[-1], stripped)
            continue

        priority = m.level.priority
        while stack and stack[-1].level.priority >= priority:
            stack.pop()

        is_dash = m.level is SectionLevel.DASH
        section = Section(
            level=m.level,
            number=m.number,
            title=None if is_dash else m.text,
            content=m.text if is_dash else "",
            sort_order=sort_order,
        )
        sort_order += 1

        if stack:
            stack[-1].children.append(section)
        else:
            roots.append(section)
        stack.append(section)

    return roots


def _append_content(section: Section, text: str) -> None:
    section.content = f"{section.content}\n{text}" if section.content else text


def _preview(text: str) -> str:
    if len(text) <= _PREVIEW_CHARS:
        return text
    return text[:_PREVIEW_CHARS] + "..."
