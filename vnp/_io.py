"""vnp/_io.py — shared helpers of the vnp commands: logging, input, JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from extraction import (
    ExtractionError,
    extract_text,
    extract_text_with_html,
    probe_capabilities,
)

console = Console()
err_console = Console(stderr=True)

_PLAIN_SUFFIXES = {".txt", ".md"}
_HTML_SUFFIXES  = {".html", ".htm"}


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _require(path: Path) -> None:
    if not path.exists():
        console.print(f"[red]File not found:[/red] {path}")
        raise SystemExit(1)


def read_text_input(path_str: str) -> str:
    """Text of a .txt/.md file, or extracted text of a PDF / Word document."""
    path = Path(path_str)
    _require(path)
    if path.suffix.lower() in _PLAIN_SUFFIXES:
        return path.read_text(encoding="utf-8")
    try:
        return extract_text(path, probe_capabilities())
    except ExtractionError as e:
        console.print(f"[red]Text extraction failed:[/red] {e}")
        raise SystemExit(1)


def read_html_input(path_str: str) -> str:
    """An .html file as-is, or the HTML rendering of a Word document."""
    path = Path(path_str)
    _require(path)
    if path.suffix.lower() in _HTML_SUFFIXES:
        return path.read_text(encoding="utf-8")
    try:
        return extract_text_with_html(path, probe_capabilities())
    except ExtractionError as e:
        console.print(f"[red]HTML extraction failed:[/red] {e}")
        raise SystemExit(1)


def to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, list):
        return [to_jsonable(o) for o in obj]
    return obj


def print_json(obj: Any) -> None:
    console.print_json(json.dumps(to_jsonable(obj), ensure_ascii=False, default=str))


def write_json(obj: Any, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(
        json.dumps(to_jsonable(obj), ensure_ascii=False, indent=2, default=str),
        encoding="utf-8",
    )
    console.print(f"[green]JSON:[/green] {out}")
