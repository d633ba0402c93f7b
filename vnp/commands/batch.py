"""Command: vnp batch — full pipeline for every document of a manifest."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.table import Table

from data_model import ParseStatus
from extraction import probe_capabilities
from llm_query import DEFAULT_MODEL
from pipeline import (
    BatchItem,
    JsonFileSink,
    ManifestError,
    PipelineOptions,
    load_manifest,
    run_batch,
)
from vnp._io import console

DEFAULT_OUT = Path("output")


def _status_cell(item: BatchItem) -> str:
    result = item.result
    if result.status is ParseStatus.FAILED:
        return "[red]FAILED[/red]"
    if result.skipped:
        return "[yellow]SKIPPED[/yellow]"
    return "[green]OK[/green]"


def show_summary(items: list[BatchItem]) -> None:
    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("NUMBER",     no_wrap=True, style="bold")
    table.add_column("FILE",       no_wrap=False, max_width=40)
    table.add_column("STATUS",     no_wrap=True)
    table.add_column("SECTIONS",   justify="right", no_wrap=True)
    table.add_column("TARGETS",    justify="right", no_wrap=True)
    table.add_column("APPENDICES", justify="right", no_wrap=True)
    table.add_column("NOTE",       no_wrap=False, max_width=50)

    for item in items:
        r = item.result
        note = r.skip_reason or (str(r.errors[0]) if r.errors else "")
        if r.used_ocr:
            note = f"OCR {note}".strip()
        table.add_row(
            item.entry.number,
            r.source_file,
            _status_cell(item),
            str(r.sections_count),
            str(r.targets_count),
            str(len(r.appendices)),
            note,
        )

    console.print()
    console.print(table)

    failed = sum(1 for i in items if i.result.status is ParseStatus.FAILED)
    skipped = sum(1 for i in items if i.result.skipped and i.result.status is not ParseStatus.FAILED)
    console.print(
        f"  [dim]{len(items)} documents: {len(items) - failed - skipped} parsed, "
        f"{skipped} skipped, {failed} failed[/dim]\n"
    )


def run(args: argparse.Namespace) -> None:
    try:
        manifest = load_manifest(args.manifest)
    except ManifestError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    console.print(
        f"Manifest [bold]{manifest.path.name}[/bold]: "
        f"{len(manifest.active)} of {len(manifest.entries)} documents active"
    )

    template = PipelineOptions(
        file_path=manifest.base_dir,
        document_number="",
        use_llm=args.llm,
        model=args.model,
        max_workers=args.workers,
        dry_run=args.dry_run,
    )
    sink = JsonFileSink(args.out_dir)
    items = run_batch(manifest, template, probe_capabilities(), sink=sink, force=args.force)

    show_summary(items)

    if any(i.result.status is ParseStatus.FAILED for i in items):
        raise SystemExit(1)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "batch",
        help="Full pipeline for every document of a JSON manifest.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Runs `vnp parse` for each active manifest entry. Documents whose JSON
output already exists are skipped unless --force is given.

Manifest (JSON):
  {"baseDir": "docs", "defaultType": "QUYET_DINH",
   "files": [{"file": "qd-1234.pdf", "number": "1234/QĐ-TTg", "date": "2023-10-20"}]}

Examples:
  vnp batch --manifest docs/manifest.json
  vnp batch --manifest docs/manifest.json --out-dir out/ --force --llm
        """,
    )
    p.add_argument("--manifest", required=True, type=Path, help="Manifest JSON file.")
    p.add_argument(
        "--out-dir",
        dest="out_dir",
        type=Path,
        default=DEFAULT_OUT,
        metavar="DIR",
        help=f"Output directory (default: {DEFAULT_OUT}/).",
    )
    p.add_argument("--llm", action="store_true", help="LLM-assisted target extraction (Gemini).")
    p.add_argument(
        "--model", "-m",
        default=DEFAULT_MODEL,
        metavar="MODEL",
        help=f"Gemini model (default: {DEFAULT_MODEL}).",
    )
    p.add_argument("--workers", "-w", type=int, default=1, metavar="N",
                   help="Parallel target extraction per document (default: 1).")
    p.add_argument("--dry-run", dest="dry_run", action="store_true", help="Parse without saving.")
    p.add_argument("--force", action="store_true", help="Re-parse documents that already have output.")
    p.set_defaults(func=run)
