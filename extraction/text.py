"""
extraction/text.py — text (and HTML) of source documents.

Formats:
  .pdf          PyMuPDF text layer, one block per page
  .docx         python-docx paragraphs and tables (tables as pipe rows)
  .doc          converted to .docx with LibreOffice (soffice --headless)
  .txt / .md    read as UTF-8

HTML (extract_text_with_html) is rendered for .doc/.docx only: paragraphs
become <p>, tables keep their <table>/<tr>/<td> structure.

Public API:
  extract_text(path, capabilities)                  -> str
  extract_text_with_html(path, capabilities)        -> str
  resolve_source_file(path, capabilities, work_dir) -> Path
  supports_html(path)                               -> bool
"""

from __future__ import annotations

import html
import logging
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import docx
import fitz  # PyMuPDF
from docx.document import Document as DocxDocument
from docx.table import Table
from docx.text.paragraph import Paragraph

from extraction.capabilities import Capabilities
from extraction.errors import ExtractionError

log = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}
HTML_SUFFIXES = {".doc", ".docx"}
SOFFICE_TIMEOUT = 120  # seconds


# ---------------------------------------------------------------------------
# File resolution
# ---------------------------------------------------------------------------

def _is_ole_doc(path: Path) -> bool:
    """Legacy binary Word file (OLE compound document)."""
    with path.open("rb") as fh:
        return fh.read(8) == b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def convert_doc_to_docx(path: Path, capabilities: Capabilities, out_dir: Path) -> Path:
    """
    Converts a .doc with LibreOffice into out_dir (owned by the caller).

    Raises:
        ExtractionError: LibreOffice missing or conversion failed.
    """
    if not capabilities.can_convert_doc:
        raise ExtractionError(f"Cannot convert {path.name}: LibreOffice (soffice) not found.")

    cmd = [
        capabilities.soffice, "--headless", "--convert-to", "docx",
        "--outdir", str(out_dir), str(path),
    ]
    log.info("Converting %s with LibreOffice", path.name)
    try:
        subprocess.run(cmd, check=True, capture_output=True, timeout=SOFFICE_TIMEOUT)
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
        raise ExtractionError(f"LibreOffice conversion of {path.name} failed: {exc}") from exc

    converted = out_dir / f"{path.stem}.docx"
    if not converted.exists():
        raise ExtractionError(f"LibreOffice produced no output for {path.name}.")
    return converted


def resolve_source_file(
    path: str | Path,
    capabilities: Capabilities | None = None,
    work_dir: Path | None = None,
) -> Path:
    """
    File actually read for a document.

    A binary .doc is replaced by a sibling .pdf, else a sibling .docx, else
    a LibreOffice conversion written into work_dir. A .doc that is really a
    .docx (zip) is used as-is.

    Raises:
        ExtractionError: the file does not exist or cannot be converted.
    """
    path = Path(path)
    if not path.exists():
        raise ExtractionError(f"File not found: {path}")

    if path.suffix.lower() != ".doc" or not _is_ole_doc(path):
        return path

    for sibling_suffix in (".pdf", ".docx"):
        sibling = path.with_suffix(sibling_suffix)
        if sibling.exists():
            log.info("Using %s instead of binary %s", sibling.name, path.name)
            return sibling

    if work_dir is None:
        raise ExtractionError(f"Cannot convert {path.name}: no work directory for the LibreOffice output.")
    return convert_doc_to_docx(path, capabilities or Capabilities(), work_dir)


@contextmanager
def _resolved_source(path: str | Path, capabilities: Capabilities | None) -> Iterator[Path]:
    """resolve_source_file() whose conversion output is removed on exit."""
    with tempfile.TemporaryDirectory(prefix="vnp-doc-") as work_dir:
        yield resolve_source_file(path, capabilities, Path(work_dir))


def supports_html(path: str | Path) -> bool:
    return Path(path).suffix.lower() in HTML_SUFFIXES


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

def _pdf_text(path: Path) -> str:
    try:
        doc = fitz.open(path)
    except (fitz.FileDataError, RuntimeError) as exc:
        raise ExtractionError(f"Cannot open PDF {path}: {exc}") from exc
    pages: list[str] = []
    try:
        for page in doc:
            try:
                pages.append(page.get_text("text"))
            except (RuntimeError, ValueError) as exc:
                raise ExtractionError(
                    f"Cannot read page {page.number + 1} of {path.name}: {exc}"
                ) from exc
    finally:
        doc.close()
    return "\n".join(pages)


# ---------------------------------------------------------------------------
# DOCX
# ---------------------------------------------------------------------------

def _open_docx(path: Path) -> DocxDocument:
    try:
        return docx.Document(str(path))
    except Exception as exc:  # zipfile, lxml and KeyError variants
        raise ExtractionError(f"Cannot open DOCX {path}: {exc}") from exc


def _cell_texts(table: Table) -> list[list[str]]:
    return [[cell.text.strip() for cell in row.cells] for row in table.rows]


def _docx_text(path: Path) -> str:
    doc = _open_docx(path)
    out: list[str] = []
    for block in doc.iter_inner_content():
        if isinstance(block, Paragraph):
            out.append(block.text)
        elif isinstance(block, Table):
            out.extend(" | ".join(cells) for cells in _cell_texts(block))
            out.append("")
    return "\n".join(out)


def _docx_html(path: Path) -> str:
    doc = _open_docx(path)
    out: list[str] = ["<html><body>"]
    for block in doc.iter_inner_content():
        if isinstance(block, Paragraph):
            text = block.text.strip()
            if text:
                out.append(f"<p>{html.escape(text)}</p>")
        elif isinstance(block, Table):
            out.append("<table>")
            for cells in _cell_texts(block):
                tds = "".join(f"<td>{html.escape(c)}</td>" for c in cells)
                out.append(f"<tr>{tds}</tr>")
            out.append("</table>")
    out.append("</body></html>")
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_text(path: str | Path, capabilities: Capabilities | None = None) -> str:
    """
    Plain text of a document.

    Raises:
        ExtractionError: missing file, unsupported format, decoder failure.
    """
    with _resolved_source(path, capabilities) as source:
        suffix = source.suffix.lower()

        if suffix == ".pdf":
            return _pdf_text(source)
        if suffix in HTML_SUFFIXES:
            return _docx_text(source)
        if suffix in TEXT_SUFFIXES:
            try:
                return source.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise ExtractionError(f"Cannot read {source}: {exc}") from exc
        raise ExtractionError(f"Unsupported file type: {source.suffix or source.name}")


def extract_text_with_html(path: str | Path, capabilities: Capabilities | None = None) -> str:
    """
    HTML rendering of a .doc/.docx document.

    Raises:
        ExtractionError: not a Word document, or it cannot be read.
    """
    with _resolved_source(path, capabilities) as source:
        if source.suffix.lower() not in HTML_SUFFIXES:
            raise ExtractionError(f"HTML rendering needs a Word document, got {source.name}")
        return _docx_html(source)
