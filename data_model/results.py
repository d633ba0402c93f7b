"""
data_model/results.py — pipeline outcome and accumulated stage errors.

StageError — a single recoverable failure, tagged with the pipeline stage
    that produced it (and the section key for per-leaf failures).
PipelineResult — sections, targets grouped by section key, appendices and
    the ordered error list for one document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .appendices import Appendix
from .documents import ParsedDocument
from .targets import ExtractedTarget


class Stage(StrEnum):
    EXTRACT_TEXT = "extract_text"
    OCR          = "ocr"
    STRUCTURE    = "structure"
    TARGETS      = "targets"
    APPENDIX     = "appendix"
    PERSIST      = "persist"


class ParseStatus(StrEnum):
    COMPLETED = "COMPLETED"
    FAILED    = "FAILED"


@dataclass(slots=True)
class StageError:
    """
    One entry of the accumulated error list.

    - stage:       stage that reported the problem
    - message:     human-readable description
    - section_key: "LEVEL:number:sort_order" for per-section failures
    """

    stage: Stage
    message: str
    section_key: str | None = None

    def __str__(self) -> str:
        where = f" [{self.section_key}]" if self.section_key else ""
        return f"{self.stage}{where}: {self.message}"


@dataclass(slots=True)
class PipelineResult:
    """
    Aggregate produced for one document.

    - skipped / skip_reason: input insufficiency (no usable text); the
      remaining fields are then empty
    - targets_by_section:    section key -> targets, in document order
    """

    document_number: str
    source_file: str
    status: ParseStatus = ParseStatus.COMPLETED
    skipped: bool = False
    skip_reason: str | None = None
    document: ParsedDocument | None = None
    targets_by_section: dict[str, list[ExtractedTarget]] = field(default_factory=dict)
    appendices: list[Appendix] = field(default_factory=list)
    errors: list[StageError] = field(default_factory=list)
    used_ocr: bool = False
    document_id: str | None = None     # assigned by the result sink

    @property
    def targets_count(self) -> int:
        return sum(len(t) for t in self.targets_by_section.values())

    @property
    def sections_count(self) -> int:
        if self.document is None:
            return 0
        return _count(self.document.sections)

    @property
    def appendix_rows_count(self) -> int:
        return sum(len(a.rows) for a in self.appendices)


def _count(sections) -> int:
    return sum(1 + _count(s.children) for s in sections)
