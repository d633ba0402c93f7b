"""Command: vnp appendix — appendix tables ("PHỤ LỤC")."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.table import Table

from appendix import parse_appendices, parse_appendices_from_html
from data_model import Appendix
from vnp._io import console, print_json, read_html_input, read_text_input

_HTML_INPUT = {".html", ".htm", ".doc", ".docx"}
_PREVIEW_ROWS = 5


def _show_appendix(a: Appendix) -> None:
    console.print(
        f"[bold]Phụ lục {a.appendix_number}[/bold] [cyan]{a.appendix_type}[/cyan]  {a.title_vi}"
    )
    if not a.columns:
        console.print("  [dim](no table)[/dim]\n")
        return

    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", row_styles=["", "dim"])
    for col in a.columns:
        table.add_column(col, no_wrap=False, max_width=40)
    for row in a.rows[:_PREVIEW_ROWS]:
        table.add_row(*(str(row.data.get(col, "")) for col in a.columns))

    console.print(table)
    more = len(a.rows) - _PREVIEW_ROWS
    suffix = f", {more} not shown" if more > 0 else ""
    console.print(f"  [dim]{len(a.rows)} rows{suffix}[/dim]\n")


def run(args: argparse.Namespace) -> None:
    use_html = args.html or Path(args.file).suffix.lower() in _HTML_INPUT
    if use_html:
        appendices = parse_appendices_from_html(read_html_input(args.file))
    else:
        appendices = parse_appendices(read_text_input(args.file))

    if args.json:
        print_json(appendices)
        return

    if not appendices:
        console.print("[yellow]No appendices found.[/yellow]")
        return
    for a in appendices:
        _show_appendix(a)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "appendix",
        help="Appendix tables (\"PHỤ LỤC\") from text or HTML.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Finds "PHỤ LỤC <n>" sections and parses their tables.

Word and HTML files go through the HTML pipeline; text and PDF files
through the plain-text one.

Examples:
  vnp appendix quyet-dinh-1234.docx
  vnp appendix phu-luc.txt --json
        """,
    )
    p.add_argument("file", metavar="FILE", help="Text, PDF, Word or HTML file.")
    p.add_argument("--html", action="store_true", help="Force the HTML pipeline.")
    p.add_argument("--json", action="store_true", help="Print appendices as JSON.")
    p.set_defaults(func=run)
