"""
pipeline — document orchestration: text → structure → targets → appendices → sink.

Public API:
  run_pipeline(options, capabilities, collaborators, sink) -> PipelineResult
  run_batch(manifest, template, capabilities, sink, force)  -> list[BatchItem]
  load_manifest(path)                                       -> Manifest
  PipelineOptions, DocumentType, PlanLevel, MIN_TEXT_LENGTH
  JsonFileSink, build_records, dry_run_summary
"""

from .config import DocumentType, PipelineOptions, PlanLevel, MIN_TEXT_LENGTH
from .orchestrator import Collaborators, default_collaborators, run_pipeline
from .records import build_records, dry_run_summary, flatten_section_records
from .sinks import JsonFileSink, ResultSink, document_file_name
from .batch import (
    BatchItem,
    Manifest,
    ManifestEntry,
    ManifestError,
    entry_options,
    load_manifest,
    run_batch,
)

__all__ = [
    "DocumentType",
    "PipelineOptions",
    "PlanLevel",
    "MIN_TEXT_LENGTH",
    "Collaborators",
    "default_collaborators",
    "run_pipeline",
    "build_records",
    "dry_run_summary",
    "flatten_section_records",
    "JsonFileSink",
    "ResultSink",
    "document_file_name",
    "BatchItem",
    "Manifest",
    "ManifestEntry",
    "ManifestError",
    "entry_options",
    "load_manifest",
    "run_batch",
]
