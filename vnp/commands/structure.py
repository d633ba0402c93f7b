"""Command: vnp structure — section tree of a document."""

from __future__ import annotations

import argparse

from rich import box
from rich.table import Table

from structure import count_by_level, flatten_sections, parse_structure, pretty_print
from vnp._io import console, print_json, read_text_input


def _show_table(doc) -> None:
    table = Table(
        box=box.SIMPLE_HEAD,
        show_header=True,
        header_style="bold white",
        row_styles=["", "dim"],
        expand=False,
    )
    table.add_column("#",      justify="right", no_wrap=True, style="dim")
    table.add_column("LEVEL",  no_wrap=True, style="bold cyan")
    table.add_column("NUMBER", no_wrap=True)
    table.add_column("TITLE",  no_wrap=False, max_width=60)
    table.add_column("LEN",    justify="right", no_wrap=True)

    for flat in flatten_sections(doc.sections):
        s = flat.section
        text = s.title if s.title is not None else s.content
        table.add_row(
            str(s.sort_order),
            "  " * flat.depth + str(s.level),
            s.number or "-",
            (text or "")[:80],
            str(len(s.content)),
        )

    console.print()
    console.print(table)


def run(args: argparse.Namespace) -> None:
    doc = parse_structure(read_text_input(args.file))

    if args.json:
        print_json(doc)
        return

    if args.tree:
        console.print(pretty_print(doc), markup=False, highlight=False)
    else:
        _show_table(doc)

    counts = count_by_level(doc.sections)
    summary = ", ".join(f"{level}={n}" for level, n in sorted(counts.items(), key=lambda kv: kv[0].priority))
    console.print(
        f"  [dim]{sum(counts.values())} sections ({summary or 'none'}), "
        f"preamble {len(doc.preamble)} chars, signature {len(doc.signature_block)} chars[/dim]\n"
    )


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "structure",
        help="Section tree of a document (Điều / I. / 1. / a) / -).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Splits a document into preamble, section tree and signature block.

Examples:
  vnp structure nghi-quyet-81.txt
  vnp structure quyet-dinh-1234.pdf --tree
  vnp structure quyet-dinh-1234.docx --json
        """,
    )
    p.add_argument("file", metavar="FILE", help="Text, PDF or Word document.")
    p.add_argument("--json", action="store_true", help="Print the parsed document as JSON.")
    p.add_argument("--tree", action="store_true", help="Indented tree with preamble/signature previews.")
    p.set_defaults(func=run)
