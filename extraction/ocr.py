"""
extraction/ocr.py — OCR fallback for scanned PDFs.

Pages are rendered with PyMuPDF at 300 DPI and read by tesseract
(vie+eng, --psm 6). Only used when the PDF text layer is too thin.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

import fitz  # PyMuPDF
import pytesseract
from PIL import Image

from extraction.capabilities import Capabilities
from extraction.errors import ExtractionError

log = logging.getLogger(__name__)

OCR_MAX_PAGES = 100
OCR_DPI       = 300
OCR_LANG      = "vie+eng"
OCR_CONFIG    = "--psm 6"


def _page_image(page: fitz.Page, dpi: int) -> Image.Image:
    pix = page.get_pixmap(dpi=dpi)
    return Image.open(io.BytesIO(pix.tobytes("png")))


def extract_pdf_text_with_ocr(
    path: str | Path,
    max_pages: int = OCR_MAX_PAGES,
    capabilities: Capabilities | None = None,
    dpi: int = OCR_DPI,
) -> str:
    """
    OCR text of the first max_pages pages, one block per page.

    Raises:
        ExtractionError: tesseract missing, unreadable PDF or OCR failure.
    """
    if capabilities is not None and not capabilities.can_ocr:
        raise ExtractionError("OCR requested but tesseract is not available.")

    path = Path(path)
    try:
        doc = fitz.open(path)
    except (fitz.FileDataError, RuntimeError) as exc:
        raise ExtractionError(f"Cannot open PDF {path}: {exc}") from exc

    page_count = doc.page_count
    pages: list[str] = []
    try:
        total = min(page_count, max_pages)
        for page_no in range(total):
            # TesseractError is a RuntimeError, TesseractNotFoundError an OSError
            try:
                img = _page_image(doc[page_no], dpi)
                text = pytesseract.image_to_string(img, lang=OCR_LANG, config=OCR_CONFIG)
            except (RuntimeError, OSError, ValueError) as exc:
                raise ExtractionError(f"OCR failed on page {page_no + 1}: {exc}") from exc
            pages.append(text.strip())
            log.debug("OCR page %d/%d: %d chars", page_no + 1, total, len(text))
    finally:
        doc.close()

    if page_count > max_pages:
        log.warning("OCR limited to the first %d of %d pages", max_pages, page_count)
    return "\n\n".join(p for p in pages if p)
