"""
pipeline/sinks.py — where a finished pipeline result goes.

ResultSink is the persistence boundary: it receives the aggregate result
and returns the id under which the document was stored. JsonFileSink
writes the flat records (pipeline.records) to one JSON file per document.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Protocol

from data_model import PipelineResult
from pipeline.config import PipelineOptions
from pipeline.records import build_records

log = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^\w.-]+")


class ResultSink(Protocol):
    def write(self, result: PipelineResult, options: PipelineOptions) -> str:
        ...


def document_file_name(document_number: str) -> str:
    """"81/2023/QH15" → "81_2023_QH15.json"."""
    return f"{_UNSAFE_RE.sub('_', document_number).strip('_') or 'document'}.json"


class JsonFileSink:
    """
    Writes records as JSON.

    - path to a directory: one <document_number>.json per document,
      replaced on re-parse
    - path ending in .json: that exact file
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def target_for(self, document_number: str) -> Path:
        if self.path.suffix.lower() == ".json":
            return self.path
        return self.path / document_file_name(document_number)

    def exists(self, document_number: str) -> bool:
        return self.target_for(document_number).exists()

    def write(self, result: PipelineResult, options: PipelineOptions) -> str:
        records = build_records(result, options)
        out = self.target_for(options.document_number)
        out.parent.mkdir(parents=True, exist_ok=True)
        if out.exists():
            log.info("Replacing existing %s", out)
        out.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        log.info("Saved %s (%d sections, %d targets)",
                 out, len(records["sections"]), len(records["targets"]))
        return records["document"]["id"]
