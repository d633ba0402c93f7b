"""
data_model — data structures for parsed Vietnamese plan documents.

Usage:
  from data_model import Section, ParsedDocument, ExtractedTarget, Appendix, ...

Modules:
  documents  — SectionLevel, Section, ParsedDocument, FlatSection
  targets    — TargetType, Comparison, ExtractedTarget
  appendices — AppendixType, AppendixRow, Appendix, CellValue
  results    — Stage, StageError, ParseStatus, PipelineResult
"""

from .documents import (
    SectionLevel,
    Section,
    ParsedDocument,
    FlatSection,
)
from .targets import (
    TargetType,
    Comparison,
    ExtractedTarget,
)
from .appendices import (
    AppendixType,
    AppendixRow,
    Appendix,
    CellValue,
)
from .results import (
    Stage,
    StageError,
    ParseStatus,
    PipelineResult,
)

__all__ = [
    # documents
    "SectionLevel",
    "Section",
    "ParsedDocument",
    "FlatSection",
    # targets
    "TargetType",
    "Comparison",
    "ExtractedTarget",
    # appendices
    "AppendixType",
    "AppendixRow",
    "Appendix",
    "CellValue",
    # results
    "Stage",
    "StageError",
    "ParseStatus",
    "PipelineResult",
]
