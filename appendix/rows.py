"""
appendix/rows.py — column naming and row building shared by both pipelines.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from data_model import AppendixRow, CellValue
from kpi.numbers import parse_table_number


def make_columns(header_cells: Sequence[str]) -> list[str]:
    """Blank headers → Column_N; repeated headers get a _2, _3 ... suffix."""
    columns: list[str] = []
    seen: dict[str, int] = {}
    for i, cell in enumerate(header_cells):
        name = cell.strip() or f"Column_{i + 1}"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 1
        columns.append(name)
    return columns


def synthetic_columns(width: int) -> list[str]:
    return [f"Column_{i + 1}" for i in range(width)]


def coerce_cell(raw: str) -> CellValue:
    value = parse_table_number(raw) if raw else None
    return raw if value is None else value


def build_rows(columns: Sequence[str], cell_rows: Iterable[Sequence[str]]) -> list[AppendixRow]:
    """
    One AppendixRow per non-empty cell row, numbered 1..n.

    Missing cells become ""; cells past the last column are kept as Extra_N
    (N = 1-based cell position).
    """
    rows: list[AppendixRow] = []
    for cells in cell_rows:
        if not cells or all(not c.strip() for c in cells):
            continue

        data: dict[str, CellValue] = {}
        for j, col in enumerate(columns):
            data[col] = coerce_cell(cells[j].strip()) if j < len(cells) else ""
        for j in range(len(columns), len(cells)):
            data[f"Extra_{j + 1}"] = coerce_cell(cells[j].strip())

        number = len(rows) + 1
        rows.append(AppendixRow(row_number=number, data=data, sort_order=number))
    return rows


def renumber(rows: Iterable[AppendixRow], offset: int) -> list[AppendixRow]:
    return [
        AppendixRow(
            row_number=r.row_number + offset,
            data=r.data,
            sort_order=r.sort_order + offset,
        )
        for r in rows
    ]
