"""
pipeline/batch.py — many documents from a JSON manifest.

Manifest:
  {
    "baseDir": "docs",                 # relative to the manifest, optional
    "defaultType": "QUYET_DINH",
    "defaultLevel": "REGIONAL",
    "defaultBody": "Thủ tướng Chính phủ",
    "files": [
      {"file": "qd-1234.pdf", "number": "1234/QĐ-TTg", "date": "2023-10-20",
       "type": "...", "level": "...", "body": "...", "signedBy": "...", "skip": false}
    ]
  }

Documents run one after another; a crash in one document is recorded as
its FAILED result and the batch continues.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any

from data_model import ParseStatus, PipelineResult, Stage, StageError
from extraction import Capabilities
from pipeline.config import DocumentType, PipelineOptions, PlanLevel
from pipeline.orchestrator import run_pipeline
from pipeline.sinks import JsonFileSink

log = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Manifest missing, not JSON, or with an invalid entry."""


@dataclass(slots=True)
class ManifestEntry:
    file: Path
    number: str
    issued_date: date | None
    document_type: DocumentType
    plan_level: PlanLevel | None
    issuing_body: str
    signed_by: str | None = None
    skip: bool = False


@dataclass(slots=True)
class Manifest:
    path: Path
    base_dir: Path
    entries: list[ManifestEntry] = field(default_factory=list)

    @property
    def active(self) -> list[ManifestEntry]:
        return [e for e in self.entries if not e.skip]


@dataclass(slots=True)
class BatchItem:
    entry: ManifestEntry
    result: PipelineResult


def _parse_date(raw: Any, number: str) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(str(raw))
    except ValueError as exc:
        raise ManifestError(f"Invalid date {raw!r} for {number}") from exc


def _enum(cls, raw: Any, number: str):
    try:
        return cls(str(raw))
    except ValueError as exc:
        raise ManifestError(f"Invalid {cls.__name__} {raw!r} for {number}") from exc


def load_manifest(path: str | Path) -> Manifest:
    """
    Raises:
        ManifestError: unreadable file, invalid JSON or invalid entry.
    """
    path = Path(path).resolve()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(f"Manifest not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest is not valid JSON: {exc}") from exc

    base_dir = path.parent
    if data.get("baseDir"):
        base_dir = (path.parent / data["baseDir"]).resolve()

    default_type = data.get("defaultType", DocumentType.QUYET_DINH)
    default_level = data.get("defaultLevel")
    default_body = data.get("defaultBody", "")

    entries: list[ManifestEntry] = []
    for raw in data.get("files", []):
        if "file" not in raw or "number" not in raw:
            raise ManifestError(f"Manifest entry needs 'file' and 'number': {raw}")
        number = str(raw["number"])
        level = raw.get("level", default_level)
        file = Path(raw["file"])
        entries.append(ManifestEntry(
            file=file if file.is_absolute() else base_dir / file,
            number=number,
            issued_date=_parse_date(raw.get("date"), number),
            document_type=_enum(DocumentType, raw.get("type", default_type), number),
            plan_level=_enum(PlanLevel, level, number) if level else None,
            issuing_body=raw.get("body", default_body),
            signed_by=raw.get("signedBy"),
            skip=bool(raw.get("skip", False)),
        ))

    return Manifest(path=path, base_dir=base_dir, entries=entries)


def entry_options(entry: ManifestEntry, template: PipelineOptions) -> PipelineOptions:
    """Per-document options: manifest metadata over shared run settings."""
    return replace(
        template,
        file_path=entry.file,
        document_number=entry.number,
        document_type=entry.document_type,
        plan_level=entry.plan_level,
        issuing_body=entry.issuing_body,
        issued_date=entry.issued_date,
        signed_by=entry.signed_by,
    )


def run_batch(
    manifest: Manifest,
    template: PipelineOptions,
    capabilities: Capabilities | None = None,
    sink: JsonFileSink | None = None,
    force: bool = False,
) -> list[BatchItem]:
    items: list[BatchItem] = []
    entries = manifest.active

    for i, entry in enumerate(entries, start=1):
        log.info("[%d/%d] %s", i, len(entries), entry.file.name)

        if sink is not None and not force and not template.dry_run and sink.exists(entry.number):
            result = PipelineResult(
                document_number=entry.number,
                source_file=entry.file.name,
                skipped=True,
                skip_reason="Already parsed (output exists)",
            )
            items.append(BatchItem(entry, result))
            continue

        try:
            result = run_pipeline(entry_options(entry, template), capabilities, sink=sink)
        except Exception as exc:  # recorded as this document's failure
            log.exception("Fatal error for %s", entry.number)
            result = PipelineResult(
                document_number=entry.number,
                source_file=entry.file.name,
                status=ParseStatus.FAILED,
                skipped=True,
                skip_reason=str(exc),
                errors=[StageError(Stage.EXTRACT_TEXT, str(exc))],
            )
        items.append(BatchItem(entry, result))

    return items
