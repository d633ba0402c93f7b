"""
extraction/capabilities.py — which external tools this machine offers.

Probed once (probe_capabilities) and passed explicitly to the pipeline; no
module-level cache.

Environment variables:
  TESSERACT_CMD   explicit path of the tesseract binary
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass

import pytesseract

log = logging.getLogger(__name__)

_SOFFICE_NAMES = ("soffice", "libreoffice")


@dataclass(frozen=True, slots=True)
class Capabilities:
    tesseract: bool = False
    tesseract_cmd: str | None = None
    soffice: str | None = None     # path of the LibreOffice binary

    @property
    def can_ocr(self) -> bool:
        return self.tesseract

    @property
    def can_convert_doc(self) -> bool:
        return self.soffice is not None


def _probe_tesseract(cmd: str | None) -> bool:
    if cmd:
        pytesseract.pytesseract.tesseract_cmd = cmd
    try:
        version = pytesseract.get_tesseract_version()
    except (pytesseract.TesseractNotFoundError, OSError) as exc:
        log.debug("tesseract not available: %s", exc)
        return False
    log.debug("tesseract %s", version)
    return True


def probe_capabilities() -> Capabilities:
    cmd = os.getenv("TESSERACT_CMD") or None
    soffice = next((p for p in map(shutil.which, _SOFFICE_NAMES) if p), None)
    caps = Capabilities(
        tesseract=_probe_tesseract(cmd),
        tesseract_cmd=cmd,
        soffice=soffice,
    )
    log.info("Capabilities: tesseract=%s soffice=%s", caps.tesseract, caps.soffice)
    return caps
