"""
kpi/extractor.py — rule-based KPI target extraction from plan prose.

Architecture:
  text
  → split_sentences()     (newlines, ". " + uppercase, ";")
  → split_sub_clauses()   (", khu vực ... trên", ", tỷ lệ ... đạt", ...)
  → find_kpi_matches()    (KPI_PATTERNS, first claim on a span wins)
  → _build_target()       (value, unit, year, name, comparison fields)
  → deduplicate_targets()

Pure functions: no I/O, no state between calls. Same input gives the same
list in the same order.

Public API:
  extract_targets_rule_based(text) -> list[ExtractedTarget]
  split_sentences(text)            -> list[str]
  split_sub_clauses(sentence)      -> list[str]
  find_kpi_matches(clause)         -> list[KpiMatch]
  deduplicate_targets(targets)     -> list[ExtractedTarget]
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from data_model import Comparison, ExtractedTarget, TargetType
from kpi.numbers import parse_inline_number
from kpi.patterns import (
    KPI_PATTERNS,
    KpiPattern,
    detect_unit,
    extract_name,
    find_period,
    find_year,
    normalize_unit,
)

log = logging.getLogger(__name__)

_VI_UPPER = (
    "A-ZĐÀÁẢÃẠĂẮẰẲẴẶÂẤẦẨẪẬÈÉẺẼẸÊẾỀỂỄỆÌÍỈĨỊ"
    "ÒÓỎÕỌÔỐỒỔỖỘƠỚỜỞỠỢÙÚỦŨỤƯỨỪỬỮỰỲÝỶỸỴ"
)

# Not case-insensitive: the lookahead must see a real capital.
_SENTENCE_SPLIT_RE = re.compile(rf"(?<=\.)\s+(?=[{_VI_UPPER}])|;\s*")

# A comma followed by a new KPI subject and its comparison verb.
_SUBCLAUSE_SPLIT_RE = re.compile(
    r",\s+(?=(?:khu\s+vực|tỷ\s+(?:lệ|trọng|số)|tốc\s+độ|số\s+lượng|diện\s+tích|"
    r"chiều\s+dài|mức|GDP|HDI)[\w\s,()-]*?\s+"
    r"(?:đạt|trên|dưới|khoảng|ít\s+nhất|ở\s+mức|có|là|còn)\s)",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class KpiMatch:
    pattern: KpiPattern
    start: int
    end: int
    value_raw: str
    value2_raw: str | None
    unit_hint: str | None

    @property
    def comparison(self) -> Comparison:
        return self.pattern.comparison


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

def split_sentences(text: str) -> list[str]:
    sentences: list[str] = []
    for line in text.split("\n"):
        for part in _SENTENCE_SPLIT_RE.split(line):
            part = part.strip()
            if part:
                sentences.append(part)
    return sentences


def split_sub_clauses(sentence: str) -> list[str]:
    return [c.strip() for c in _SUBCLAUSE_SPLIT_RE.split(sentence) if c.strip()]


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------

def find_kpi_matches(clause: str) -> list[KpiMatch]:
    """
    All KPI pattern hits in the clause, ordered by position.

    Patterns are applied in table order; a hit overlapping a span already
    claimed by an earlier pattern is dropped.
    """
    claimed: list[tuple[int, int]] = []
    matches: list[KpiMatch] = []

    for pattern in KPI_PATTERNS:
        for m in pattern.regex.finditer(clause):
            start, end = m.span()
            if any(start < c_end and end > c_start for c_start, c_end in claimed):
                continue
            claimed.append((start, end))

            hint = pattern.default_unit
            if pattern.unit_group is not None and m.group(pattern.unit_group):
                hint = m.group(pattern.unit_group)

            matches.append(
                KpiMatch(
                    pattern=pattern,
                    start=start,
                    end=end,
                    value_raw=m.group(pattern.value_group),
                    value2_raw=m.group(pattern.value_group2) if pattern.value_group2 else None,
                    unit_hint=hint,
                )
            )

    matches.sort(key=lambda km: km.start)
    return matches


# ---------------------------------------------------------------------------
# Target building
# ---------------------------------------------------------------------------

def _build_target(km: KpiMatch, clause: str, sentence: str) -> ExtractedTarget | None:
    value = parse_inline_number(km.value_raw)
    value2 = parse_inline_number(km.value2_raw) if km.value2_raw else None
    if value is None and value2 is None:
        return None

    unit = detect_unit(clause)
    if unit is None and km.unit_hint:
        unit = normalize_unit(km.unit_hint)

    year = find_year(clause)
    if year is None:
        year = find_year(sentence)

    metadata: dict = {}
    period = find_period(clause) or find_period(sentence)
    if period:
        metadata["period"] = {"start_year": period[0], "end_year": period[1]}

    target = ExtractedTarget(
        target_type=TargetType.QUANTITATIVE,
        name_vi=extract_name(clause),
        raw_text_vi=clause.strip(),
        unit=unit,
        target_year=year,
    )

    match km.comparison:
        case Comparison.RANGE:
            target.target_min = value
            target.target_max = value2
            if value is not None and value2 is not None:
                target.target_value = (value + value2) / 2
        case Comparison.ABOVE:
            target.target_value = value
            target.target_min = value
            metadata["comparison"] = Comparison.ABOVE.value
        case Comparison.BELOW:
            target.target_value = value
            target.target_max = value
            metadata["comparison"] = Comparison.BELOW.value
        case Comparison.APPROXIMATELY:
            target.target_value = value
            metadata["comparison"] = Comparison.APPROXIMATELY.value
        case Comparison.EXACT:
            target.target_value = value

    if target.target_value is None and target.target_min is None and target.target_max is None:
        return None

    target.metadata = metadata or None
    return target


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_targets_rule_based(text: str) -> list[ExtractedTarget]:
    """Regex-based extraction; every sentence and sub-clause is scanned."""
    targets: list[ExtractedTarget] = []

    for sentence in split_sentences(text):
        for clause in split_sub_clauses(sentence):
            for match in find_kpi_matches(clause):
                target = _build_target(match, clause, sentence)
                if target is None:
                    log.debug("Dropped %s match without a number: %r",
                              match.pattern.label, match.value_raw)
                    continue
                targets.append(target)

    return deduplicate_targets(targets)


def deduplicate_targets(targets: list[ExtractedTarget]) -> list[ExtractedTarget]:
    """Keeps the first target per (name, value, unit, min, max)."""
    seen: set[tuple] = set()
    unique: list[ExtractedTarget] = []
    for t in targets:
        key = t.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(t)
    return unique
