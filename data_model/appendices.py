"""
data_model/appendices.py — structured appendix tables ("Phụ lục").
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class AppendixType(StrEnum):
    PROJECT_LIST    = "PROJECT_LIST"
    MAP_LIST        = "MAP_LIST"
    INDICATOR_TABLE = "INDICATOR_TABLE"
    ROUTE_TABLE     = "ROUTE_TABLE"
    FACILITY_LIST   = "FACILITY_LIST"
    MIXED           = "MIXED"


# Cell value after numeric coercion: number when parseable, raw text otherwise.
type CellValue = str | int | float


@dataclass(slots=True)
class AppendixRow:
    row_number: int             # 1-based, contiguous within one appendix
    data: dict[str, CellValue]
    sort_order: int             # always equal to row_number


@dataclass(slots=True)
class Appendix:
    appendix_number: int
    title_vi: str
    appendix_type: AppendixType
    columns: list[str] = field(default_factory=list)
    rows: list[AppendixRow] = field(default_factory=list)
    sort_order: int = 0
