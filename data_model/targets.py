"""
data_model/targets.py — KPI targets extracted from plan prose.

ExtractedTarget mirrors one statement such as
  "GDP bình quân đầu người đạt khoảng 7.500 USD"
with its resolved value(s), unit and target year.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TargetType(StrEnum):
    QUANTITATIVE = "QUANTITATIVE"
    QUALITATIVE  = "QUALITATIVE"
    MILESTONE    = "MILESTONE"


class Comparison(StrEnum):
    """Relationship between the statement and its number."""
    EXACT         = "exact"
    ABOVE         = "above"
    BELOW         = "below"
    RANGE         = "range"
    APPROXIMATELY = "approximately"


@dataclass(slots=True)
class ExtractedTarget:
    target_type: TargetType
    name_vi: str
    raw_text_vi: str
    name_en: str | None = None
    unit: str | None = None
    target_value: float | None = None
    target_min: float | None = None
    target_max: float | None = None
    target_year: int | None = None
    baseline_value: float | None = None
    baseline_year: int | None = None
    metadata: dict[str, Any] | None = None

    @property
    def dedup_key(self) -> tuple:
        return (self.name_vi, self.target_value, self.unit, self.target_min, self.target_max)

    @property
    def comparison(self) -> str | None:
        if self.metadata:
            return self.metadata.get("comparison")
        return None
