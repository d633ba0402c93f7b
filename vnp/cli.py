"""
vnp — CLI for parsing Vietnamese planning documents.

Usage:
  vnp [-v] <command> [options]

Commands:
  structure   Section tree of a document (Điều / I. / 1. / a) / -).
  targets     KPI targets from text (rule-based or Gemini).
  appendix    Appendix tables ("PHỤ LỤC") from text or HTML.
  parse       Full pipeline for one document.
  batch       Full pipeline for every document of a JSON manifest.
"""

from __future__ import annotations

import argparse
import sys

# Windows terminals may default to cp1252; Vietnamese needs UTF-8.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from vnp._io import setup_logging
from vnp.commands import appendix as cmd_appendix
from vnp.commands import batch as cmd_batch
from vnp.commands import parse as cmd_parse
from vnp.commands import structure as cmd_structure
from vnp.commands import targets as cmd_targets


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vnp",
        description="vnplan-parser — Vietnamese planning document parser.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="vnp 0.1.0"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging on stderr.",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        metavar="<command>",
        dest="command",
    )
    subparsers.required = True

    cmd_structure.add_parser(subparsers)
    cmd_targets.add_parser(subparsers)
    cmd_appendix.add_parser(subparsers)
    cmd_parse.add_parser(subparsers)
    cmd_batch.add_parser(subparsers)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
