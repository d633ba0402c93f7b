"""
pipeline/config.py — options of one pipeline run.

Everything the orchestrator needs is passed in explicitly: document
metadata, extraction strategy settings and limits. External tool
availability travels separately as extraction.Capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from pathlib import Path

from extraction import OCR_MAX_PAGES
from llm_query import DEFAULT_MODEL, DEFAULT_TIMEOUT

# Meaningful characters below which the text layer is considered empty.
MIN_TEXT_LENGTH = 500


class DocumentType(StrEnum):
    NGHI_QUYET = "NGHI_QUYET"     # resolution (Nghị quyết)
    QUYET_DINH = "QUYET_DINH"     # decision (Quyết định)


class PlanLevel(StrEnum):
    NATIONAL = "NATIONAL"
    REGIONAL = "REGIONAL"
    SECTOR   = "SECTOR"
    PROVINCE = "PROVINCE"


@dataclass(slots=True)
class PipelineOptions:
    file_path: Path
    document_number: str
    document_type: DocumentType = DocumentType.QUYET_DINH
    issuing_body: str = ""
    issued_date: date | None = None
    signed_by: str | None = None
    plan_level: PlanLevel | None = None
    use_llm: bool = False
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    llm_timeout: float = DEFAULT_TIMEOUT
    max_workers: int = 1
    ocr_max_pages: int = OCR_MAX_PAGES
    min_text_length: int = MIN_TEXT_LENGTH
    dry_run: bool = False

    @property
    def effective_plan_level(self) -> PlanLevel:
        """Resolutions are national plans, decisions regional ones, unless stated."""
        if self.plan_level is not None:
            return self.plan_level
        if self.document_type is DocumentType.NGHI_QUYET:
            return PlanLevel.NATIONAL
        return PlanLevel.REGIONAL
