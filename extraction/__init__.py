"""
extraction — text-extraction collaborators (PDF, DOCX, DOC, OCR).

Public API:
  extract_text(path, capabilities)                     -> str
  extract_text_with_html(path, capabilities)           -> str
  extract_pdf_text_with_ocr(path, max_pages, capabilities) -> str
  resolve_source_file(path, capabilities, work_dir)    -> Path
  probe_capabilities()                                 -> Capabilities
  ExtractionError
"""

from .errors import ExtractionError
from .capabilities import Capabilities, probe_capabilities
from .text import (
    extract_text,
    extract_text_with_html,
    resolve_source_file,
    supports_html,
)
from .ocr import extract_pdf_text_with_ocr, OCR_MAX_PAGES

__all__ = [
    "ExtractionError",
    "Capabilities",
    "probe_capabilities",
    "extract_text",
    "extract_text_with_html",
    "resolve_source_file",
    "supports_html",
    "extract_pdf_text_with_ocr",
    "OCR_MAX_PAGES",
]
