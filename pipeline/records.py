"""
pipeline/records.py — flat, parent-referencing records of a pipeline result.

Shape handed to persistence:
  document    {id, document_number, document_type, plan_level, issuing_body,
               signed_by, issued_date, source_file, parse_status, parse_errors}
  sections    [{id, document_id, parent_id, level, number, title, content, sort_order}]
  targets     [{id, section_id, target_type, name_vi, ..., metadata}]
  appendices  [{id, document_id, appendix_number, title_vi, appendix_type,
                columns, sort_order, rows: [{row_number, data, sort_order}]}]

Ids are fresh UUIDs; one document per plan is the storage layer's concern.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import asdict
from typing import Any

from data_model import ExtractedTarget, PipelineResult, Section
from pipeline.config import PipelineOptions
from structure import flatten_sections


def _new_id() -> str:
    return str(uuid.uuid4())


def flatten_section_records(
    sections: Iterable[Section],
    document_id: str,
    parent_id: str | None = None,
) -> tuple[list[dict[str, Any]], dict[str, str]]:
    """Pre-order section records and a section key → record id map."""
    records: list[dict[str, Any]] = []
    id_map: dict[str, str] = {}

    def walk(secs: Iterable[Section], pid: str | None) -> None:
        for s in secs:
            sid = _new_id()
            id_map[s.key] = sid
            records.append({
                "id": sid,
                "document_id": document_id,
                "parent_id": pid,
                "level": str(s.level),
                "number": s.number,
                "title": s.title or None,
                "content": s.content or None,
                "sort_order": s.sort_order,
            })
            walk(s.children, sid)

    walk(sections, parent_id)
    return records, id_map


def target_record(target: ExtractedTarget, section_id: str | None) -> dict[str, Any]:
    record = asdict(target)
    record["target_type"] = str(target.target_type)
    record["id"] = _new_id()
    record["section_id"] = section_id
    return record


def build_records(result: PipelineResult, options: PipelineOptions) -> dict[str, Any]:
    document_id = _new_id()
    sections: list[dict[str, Any]] = []
    id_map: dict[str, str] = {}
    if result.document is not None:
        sections, id_map = flatten_section_records(result.document.sections, document_id)

    targets = [
        target_record(t, id_map.get(key))
        for key, items in result.targets_by_section.items()
        for t in items
    ]

    appendices = []
    for a in result.appendices:
        appendices.append({
            "id": _new_id(),
            "document_id": document_id,
            "appendix_number": a.appendix_number,
            "title_vi": a.title_vi,
            "appendix_type": str(a.appendix_type),
            "columns": list(a.columns),
            "sort_order": a.sort_order,
            "rows": [asdict(r) for r in a.rows],
        })

    return {
        "document": {
            "id": document_id,
            "document_number": options.document_number,
            "document_type": str(options.document_type),
            "plan_level": str(options.effective_plan_level),
            "issuing_body": options.issuing_body,
            "signed_by": options.signed_by,
            "issued_date": options.issued_date.isoformat() if options.issued_date else None,
            "source_file": result.source_file,
            "parse_status": str(result.status),
            "parse_errors": [str(e) for e in result.errors] or None,
            "preamble": result.document.preamble if result.document else None,
            "signature_block": result.document.signature_block if result.document else None,
        },
        "sections": sections,
        "targets": targets,
        "appendices": appendices,
    }


def dry_run_summary(result: PipelineResult, options: PipelineOptions) -> dict[str, Any]:
    """Compact overview printed instead of persisting."""
    flat = flatten_sections(result.document.sections) if result.document else []
    return {
        "document_number": options.document_number,
        "document_type": str(options.document_type),
        "issuing_body": options.issuing_body,
        "source_file": result.source_file,
        "status": str(result.status),
        "used_ocr": result.used_ocr,
        "sections_count": result.sections_count,
        "targets_count": result.targets_count,
        "appendices_count": len(result.appendices),
        "appendix_rows_count": result.appendix_rows_count,
        "errors": [str(e) for e in result.errors],
        "sections": [
            {
                "level": str(f.section.level),
                "number": f.section.number,
                "title": f.section.title,
                "content_length": len(f.section.content),
                "depth": f.depth,
            }
            for f in flat
        ],
        "targets": [
            {
                "section_key": key,
                "targets": [
                    {
                        "target_type": str(t.target_type),
                        "name_vi": t.name_vi,
                        "unit": t.unit,
                        "target_value": t.target_value,
                        "target_year": t.target_year,
                    }
                    for t in items
                ],
            }
            for key, items in result.targets_by_section.items()
        ],
        "appendices": [
            {
                "appendix_number": a.appendix_number,
                "title_vi": a.title_vi,
                "appendix_type": str(a.appendix_type),
                "columns": a.columns,
                "row_count": len(a.rows),
            }
            for a in result.appendices
        ],
    }
