"""Command: vnp targets — KPI targets from plan text."""

from __future__ import annotations

import argparse

from rich import box
from rich.table import Table

from data_model import ExtractedTarget
from kpi import DEMO_TEXT, extract_targets
from llm_query import DEFAULT_MODEL
from vnp._io import console, print_json, read_text_input

COMPARISON_STYLE: dict[str, str] = {
    "above":         "green",
    "below":         "yellow",
    "approximately": "cyan",
}


def _fmt_number(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:g}"


def show_targets(targets: list[ExtractedTarget]) -> None:
    if not targets:
        console.print("[yellow]No KPI targets found.[/yellow]")
        return

    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("NAME",  no_wrap=False, max_width=50, style="bold")
    table.add_column("VALUE", justify="right", no_wrap=True)
    table.add_column("MIN",   justify="right", no_wrap=True)
    table.add_column("MAX",   justify="right", no_wrap=True)
    table.add_column("UNIT",  no_wrap=True)
    table.add_column("YEAR",  justify="right", no_wrap=True)
    table.add_column("CMP",   no_wrap=True)

    for t in targets:
        cmp = t.comparison or "exact"
        table.add_row(
            t.name_vi,
            _fmt_number(t.target_value),
            _fmt_number(t.target_min),
            _fmt_number(t.target_max),
            t.unit or "-",
            str(t.target_year or "-"),
            f"[{COMPARISON_STYLE.get(cmp, 'white')}]{cmp}[/]",
        )

    console.print()
    console.print(table)
    console.print(f"  [dim]{len(targets)} targets[/dim]\n")


def run(args: argparse.Namespace) -> None:
    if args.demo:
        text = DEMO_TEXT
    elif args.file:
        text = read_text_input(args.file)
    else:
        console.print("[red]Give a FILE or --demo.[/red]")
        raise SystemExit(1)

    targets = extract_targets(text, use_llm=args.llm, model=args.model)

    if args.json:
        print_json(targets)
    else:
        show_targets(targets)


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "targets",
        help="KPI targets from text (rule-based or Gemini).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=f"""
Extracts quantitative KPI targets ("đạt khoảng 7,0%/năm", "dưới 4%", ...).

With --llm the text goes to Gemini (GEMINI_API_KEY); any failure falls
back to the rule-based extractor.

Examples:
  vnp targets --demo
  vnp targets muc-tieu.txt
  vnp targets muc-tieu.txt --llm --model {DEFAULT_MODEL}
        """,
    )
    p.add_argument("file", metavar="FILE", nargs="?", help="Text, PDF or Word document.")
    p.add_argument("--demo", action="store_true", help="Use the built-in sample resolution text.")
    p.add_argument("--llm", action="store_true", help="LLM-assisted extraction (Gemini).")
    p.add_argument(
        "--model", "-m",
        default=DEFAULT_MODEL,
        metavar="MODEL",
        help=f"Gemini model (default: {DEFAULT_MODEL}).",
    )
    p.add_argument("--json", action="store_true", help="Print targets as JSON.")
    p.set_defaults(func=run)
