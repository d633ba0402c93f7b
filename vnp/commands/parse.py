"""Command: vnp parse — full pipeline for one document."""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

from rich.markup import escape

from data_model import ParseStatus, PipelineResult
from extraction import probe_capabilities
from llm_query import DEFAULT_MODEL
from pipeline import (
    DocumentType,
    JsonFileSink,
    PipelineOptions,
    PlanLevel,
    dry_run_summary,
    run_pipeline,
)
from vnp._io import console, print_json

DEFAULT_OUT = Path("output")


def _parse_date(raw: str | None) -> date | None:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        console.print(f"[red]Invalid date (expected YYYY-MM-DD):[/red] {raw}")
        raise SystemExit(1)


def options_from_args(args: argparse.Namespace) -> PipelineOptions:
    return PipelineOptions(
        file_path=Path(args.file),
        document_number=args.number,
        document_type=DocumentType(args.type),
        issuing_body=args.body,
        issued_date=_parse_date(args.date),
        signed_by=args.signed_by,
        plan_level=PlanLevel(args.level) if args.level else None,
        use_llm=args.llm,
        model=args.model,
        max_workers=args.workers,
        dry_run=args.dry_run,
    )


def print_result(result: PipelineResult) -> None:
    color = "green" if result.status is ParseStatus.COMPLETED else "red"
    console.print(
        f"\n[bold]{result.document_number}[/bold]  {result.source_file}  "
        f"[{color}]{result.status}[/{color}]"
        + ("  [yellow](OCR)[/yellow]" if result.used_ocr else "")
    )
    if result.skipped:
        console.print(f"  [yellow]skipped:[/yellow] {result.skip_reason}")
    else:
        console.print(
            f"  sections: {result.sections_count}   targets: {result.targets_count}   "
            f"appendices: {len(result.appendices)} ({result.appendix_rows_count} rows)"
        )
    for err in result.errors:
        console.print(f"  [red]•[/red] {escape(str(err))}", highlight=False)
    if result.document_id:
        console.print(f"  [dim]document id {result.document_id}[/dim]")
    console.print()


def run(args: argparse.Namespace) -> None:
    options = options_from_args(args)
    sink = None if options.dry_run else JsonFileSink(args.out)

    result = run_pipeline(options, probe_capabilities(), sink=sink)

    if options.dry_run:
        print_json(dry_run_summary(result, options))
    print_result(result)

    if not options.dry_run and result.document_id:
        console.print(f"[green]JSON:[/green] {sink.target_for(options.document_number)}")

    if result.status is ParseStatus.FAILED:
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "parse",
        help="Full pipeline for one document.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Text (OCR fallback for scanned PDFs) → section tree → KPI targets per
leaf section → appendix tables → JSON records.

Errors of single stages are collected; the document still completes when
its structure was parsed.

Examples:
  vnp parse qd-1234.pdf --number 1234/QĐ-TTg --date 2023-10-20
  vnp parse nq-81.docx --number 81/2023/QH15 --type NGHI_QUYET --dry-run
  vnp parse qd-1234.pdf --number 1234/QĐ-TTg --llm --workers 4 --out out/
        """,
    )
    p.add_argument("file", metavar="FILE", help="PDF, DOC, DOCX or text file.")
    p.add_argument("--number", "-n", required=True, help='Document number, e.g. "1234/QĐ-TTg".')
    p.add_argument(
        "--type", "-t",
        choices=[t.value for t in DocumentType],
        default=DocumentType.QUYET_DINH.value,
        help="Document type (default: QUYET_DINH).",
    )
    p.add_argument(
        "--level",
        choices=[lv.value for lv in PlanLevel],
        default=None,
        help="Plan level (default: NATIONAL for resolutions, REGIONAL for decisions).",
    )
    p.add_argument("--body", default="", help="Issuing body.")
    p.add_argument("--date", default=None, metavar="YYYY-MM-DD", help="Issue date.")
    p.add_argument("--signed-by", dest="signed_by", default=None, help="Signer.")
    p.add_argument("--llm", action="store_true", help="LLM-assisted target extraction (Gemini).")
    p.add_argument(
        "--model", "-m",
        default=DEFAULT_MODEL,
        metavar="MODEL",
        help=f"Gemini model (default: {DEFAULT_MODEL}).",
    )
    p.add_argument(
        "--workers", "-w",
        type=int,
        default=1,
        metavar="N",
        help="Parallel target extraction over leaf sections (default: 1).",
    )
    p.add_argument("--dry-run", dest="dry_run", action="store_true",
                   help="Print a summary instead of saving.")
    p.add_argument(
        "--out", "-o",
        type=Path,
        default=DEFAULT_OUT,
        metavar="PATH",
        help=f"Output directory or .json file (default: {DEFAULT_OUT}/).",
    )
    p.set_defaults(func=run)
