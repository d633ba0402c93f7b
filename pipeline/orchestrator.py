"""
pipeline/orchestrator.py — one document from file to aggregate result.

Steps:
  1/5  text      resolve file, extract plain text (+ HTML for DOC/DOCX);
                 OCR fallback for thin PDF text layers; skip when still thin
  2/5  structure parse_structure()
  3/5  targets   extract_targets() per leaf section (optional thread pool)
  4/5  appendix  HTML pipeline when HTML exists, plain text otherwise
  5/5  persist   ResultSink.write() unless dry_run

Only missing content stops a document. Every other failure is recorded in
result.errors and the remaining stages still run.

Public API:
  run_pipeline(options, capabilities, collaborators, sink) -> PipelineResult
  default_collaborators(capabilities)                     -> Collaborators
"""

from __future__ import annotations

import logging
import tempfile
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from appendix import parse_appendices, parse_appendices_from_html
from data_model import (
    ExtractedTarget,
    ParseStatus,
    PipelineResult,
    Section,
    Stage,
    StageError,
)
from extraction import (
    Capabilities,
    ExtractionError,
    extract_pdf_text_with_ocr,
    extract_text,
    extract_text_with_html,
    resolve_source_file,
    supports_html,
)
from kpi import ExtractionStrategy, select_strategy
from pipeline.config import PipelineOptions
from pipeline.sinks import ResultSink
from structure import collect_leaf_sections, meaningful_text_length, parse_structure

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Collaborators:
    """External text-extraction functions; replaceable in tests."""
    resolve_file: Callable[[Path, Path], Path]
    extract_text: Callable[[Path], str]
    extract_html: Callable[[Path], str]
    extract_ocr: Callable[[Path, int], str]


def default_collaborators(capabilities: Capabilities) -> Collaborators:
    return Collaborators(
        resolve_file=lambda path, work_dir: resolve_source_file(path, capabilities, work_dir),
        extract_text=partial(extract_text, capabilities=capabilities),
        extract_html=partial(extract_text_with_html, capabilities=capabilities),
        extract_ocr=lambda path, max_pages: extract_pdf_text_with_ocr(
            path, max_pages=max_pages, capabilities=capabilities,
        ),
    )


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------

def _acquire_text(
    source: Path,
    options: PipelineOptions,
    collab: Collaborators,
    result: PipelineResult,
) -> tuple[str, str]:
    """Plain text and HTML ("" when unavailable); sets result.used_ocr."""
    raw_text = ""
    html_text = ""

    try:
        raw_text = collab.extract_text(source)
        log.info("  plain text: %d characters", len(raw_text))
    except ExtractionError as exc:
        result.errors.append(StageError(Stage.EXTRACT_TEXT, f"Text extraction failed: {exc}"))
        log.error("  text extraction failed: %s", exc)

    if supports_html(source):
        try:
            html_text = collab.extract_html(source)
            log.info("  HTML text: %d characters", len(html_text))
        except ExtractionError as exc:
            log.warning("  HTML extraction failed, appendices from plain text: %s", exc)

    length = meaningful_text_length(raw_text)
    if length < options.min_text_length and source.suffix.lower() == ".pdf":
        log.warning("  meaningful text is only %d chars, trying OCR", length)
        try:
            raw_text = collab.extract_ocr(source, options.ocr_max_pages)
            result.used_ocr = True
            result.errors.append(StageError(
                Stage.OCR,
                f"Used OCR fallback (original text too short: {length} meaningful chars).",
            ))
            log.info("  OCR text: %d characters", len(raw_text))
        except ExtractionError as exc:
            result.errors.append(StageError(Stage.OCR, f"OCR fallback failed: {exc}"))
            log.error("  OCR failed: %s", exc)

    return raw_text, html_text


def _extract_leaf(
    leaf: Section,
    strategy: ExtractionStrategy,
) -> tuple[str, list[ExtractedTarget] | None, StageError | None]:
    try:
        return leaf.key, strategy.extract(leaf.content), None
    except Exception as exc:  # one bad leaf must not stop the others
        log.warning("  target extraction failed for [%s %s]: %s", leaf.level, leaf.number, exc)
        return leaf.key, None, StageError(
            Stage.TARGETS,
            f"Target extraction failed for [{leaf.level} {leaf.number}]: {exc}",
            section_key=leaf.key,
        )


def _extract_targets(
    leaves: list[Section],
    strategy: ExtractionStrategy,
    max_workers: int,
    result: PipelineResult,
) -> None:
    """Per-leaf extraction; results merged in document order."""
    if max_workers > 1 and len(leaves) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(partial(_extract_leaf, strategy=strategy), leaves))
    else:
        outcomes = [_extract_leaf(leaf, strategy) for leaf in leaves]

    for key, targets, error in outcomes:
        if error is not None:
            result.errors.append(error)
        elif targets:
            result.targets_by_section[key] = targets


def _finish(result: PipelineResult) -> PipelineResult:
    if result.skipped or (result.errors and result.sections_count == 0):
        result.status = ParseStatus.FAILED
    else:
        result.status = ParseStatus.COMPLETED
    return result


def _skip(result: PipelineResult, reason: str, stage: Stage) -> PipelineResult:
    result.skipped = True
    result.skip_reason = reason
    result.errors.append(StageError(stage, reason))
    log.warning("Skipping %s: %s", result.source_file, reason)
    return _finish(result)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def run_pipeline(
    options: PipelineOptions,
    capabilities: Capabilities | None = None,
    collaborators: Collaborators | None = None,
    sink: ResultSink | None = None,
) -> PipelineResult:
    """Runs all five steps for one document and returns the aggregate."""
    collab = collaborators or default_collaborators(capabilities or Capabilities())
    path = Path(options.file_path)
    result = PipelineResult(document_number=options.document_number, source_file=path.name)

    log.info("Parsing %s (%s, %s)", path.name, options.document_number, options.document_type)

    # --- 1/5 text ---
    log.info("Step 1/5: extracting text")
    # LibreOffice output lives only as long as the text is being read
    with tempfile.TemporaryDirectory(prefix="vnp-doc-") as work_dir:
        try:
            source = collab.resolve_file(path, Path(work_dir))
        except ExtractionError as exc:
            return _skip(result, str(exc), Stage.EXTRACT_TEXT)
        if source != path:
            log.info("  using %s", source.name)

        raw_text, html_text = _acquire_text(source, options, collab, result)

    length = meaningful_text_length(raw_text)
    if length < options.min_text_length:
        return _skip(
            result,
            f"Extracted text too short ({length} meaningful chars). "
            f"Neither text extraction nor OCR produced usable content.",
            Stage.OCR if result.used_ocr else Stage.EXTRACT_TEXT,
        )

    # --- 2/5 structure ---
    log.info("Step 2/5: parsing structure")
    try:
        result.document = parse_structure(raw_text)
        log.info("  %d top-level / %d total sections",
                 len(result.document.sections), result.sections_count)
    except Exception as exc:  # recorded; appendices may still be found
        result.errors.append(StageError(Stage.STRUCTURE, f"Structure parsing failed: {exc}"))
        log.error("  structure parsing failed: %s", exc)

    # --- 3/5 targets ---
    log.info("Step 3/5: extracting KPI targets")
    if result.document is not None:
        leaves = collect_leaf_sections(result.document.sections)
        strategy = select_strategy(
            options.use_llm, options.api_key, options.model, options.llm_timeout,
        )
        log.info("  %d leaf sections, strategy %s", len(leaves), strategy.name)
        _extract_targets(leaves, strategy, options.max_workers, result)
        log.info("  %d targets", result.targets_count)
    else:
        log.info("  skipped (no structure)")

    # --- 4/5 appendix ---
    log.info("Step 4/5: parsing appendices")
    try:
        if html_text:
            result.appendices = parse_appendices_from_html(html_text)
        else:
            result.appendices = parse_appendices(raw_text)
        log.info("  %d appendices, %d rows", len(result.appendices), result.appendix_rows_count)
    except Exception as exc:  # recorded; sections and targets are kept
        result.errors.append(StageError(Stage.APPENDIX, f"Appendix parsing failed: {exc}"))
        log.error("  appendix parsing failed: %s", exc)

    _finish(result)

    # --- 5/5 persist ---
    if options.dry_run or sink is None:
        log.info("Step 5/5: dry run, nothing saved")
        return result

    log.info("Step 5/5: saving")
    try:
        result.document_id = sink.write(result, options)
    except Exception as exc:  # recorded; the parsed result is still returned
        result.errors.append(StageError(Stage.PERSIST, f"Saving failed: {exc}"))
        log.error("  saving failed: %s", exc)
        _finish(result)

    return result
