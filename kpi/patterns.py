"""
kpi/patterns.py — ordered pattern tables used by the target extractor.

Tables (each tried in order, first hit wins unless noted):
  KPI_PATTERNS    — numeric statement patterns with a Comparison label;
                    all are applied, overlapping spans go to the earlier one
  UNIT_PATTERNS   — unit vocabulary, most specific first
  YEAR_PATTERNS   — target year phrases ("đến năm", "năm", "giai đoạn", bare year)
  NAME_STRATEGIES — waterfall for the indicator name

Every table entry carries a label so a single rule can be exercised on its
own in tests.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from data_model import Comparison

_I = re.IGNORECASE | re.UNICODE

# Numeral as written in running text: "7,0", "7.500", "1.234,56".
_NUM = r"(\d[\d.,]*)"

# Inline unit suffixes accepted right after a numeral.
_PCT = r"%(?:/năm)?"
_UNIT_FULL  = rf"{_PCT}|\bUSD\b|\btriệu\b|\btỷ\b|\bnghìn\b|\bkm\b|\bha\b|\bMW\b"
_UNIT_SHORT = rf"{_PCT}|\bUSD\b|\btriệu\b|\btỷ\b|\bnghìn\b|\bkm\b|\bha\b"
_UNIT_MONEY = rf"{_PCT}|\bUSD\b|\btriệu\b|\btỷ\b|\bnghìn\b"


# ---------------------------------------------------------------------------
# KPI statement patterns
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class KpiPattern:
    label: str
    regex: re.Pattern[str]
    comparison: Comparison
    value_group: int = 1
    value_group2: int | None = None
    unit_group: int | None = None
    default_unit: str | None = None


KPI_PATTERNS: list[KpiPattern] = [
    # "6,5 - 7,0%/năm", "35 – 40%"
    KpiPattern(
        label="range",
        regex=re.compile(rf"{_NUM}\s*[-–]\s*{_NUM}\s*({_PCT}|\bUSD\b|\bkm\b|\bha\b|\bMW\b|\bGW\b)", _I),
        comparison=Comparison.RANGE,
        value_group2=2,
        unit_group=3,
    ),
    # "đạt khoảng 7,0%/năm", "đạt khoảng 7.500 USD"
    KpiPattern(
        label="reach_about",
        regex=re.compile(rf"đạt\s+khoảng\s+{_NUM}\s*({_UNIT_FULL})", _I),
        comparison=Comparison.APPROXIMATELY,
        unit_group=2,
    ),
    # "đạt trên 50%"
    KpiPattern(
        label="reach_above",
        regex=re.compile(rf"đạt\s+trên\s+{_NUM}\s*({_UNIT_FULL})?", _I),
        comparison=Comparison.ABOVE,
        unit_group=2,
    ),
    # "trên 40%"
    KpiPattern(
        label="above_percent",
        regex=re.compile(rf"\btrên\s+{_NUM}\s*({_PCT})", _I),
        comparison=Comparison.ABOVE,
        unit_group=2,
    ),
    # "dưới 10%", "đạt dưới 4%"
    KpiPattern(
        label="below",
        regex=re.compile(rf"(?:đạt\s+)?dưới\s+{_NUM}\s*({_UNIT_SHORT})?", _I),
        comparison=Comparison.BELOW,
        unit_group=2,
    ),
    # "đạt 35%", "đạt 1.200 MW"
    KpiPattern(
        label="reach",
        regex=re.compile(rf"đạt\s+{_NUM}\s*({_UNIT_FULL})?", _I),
        comparison=Comparison.EXACT,
        unit_group=2,
    ),
    # "khoảng 30%" without "đạt"
    KpiPattern(
        label="about",
        regex=re.compile(rf"khoảng\s+{_NUM}\s*({_UNIT_MONEY})", _I),
        comparison=Comparison.APPROXIMATELY,
        unit_group=2,
    ),
    # "là 15%", "còn 3%"
    KpiPattern(
        label="is_remaining",
        regex=re.compile(rf"(?:là|còn)\s+{_NUM}\s*({_PCT})", _I),
        comparison=Comparison.EXACT,
        unit_group=2,
    ),
    # "tăng 8%", "giảm 1,5%/năm"
    KpiPattern(
        label="change",
        regex=re.compile(rf"(?:tăng|giảm)\s+{_NUM}\s*({_PCT})", _I),
        comparison=Comparison.EXACT,
        unit_group=2,
    ),
    # "ở mức 42%"
    KpiPattern(
        label="at_level",
        regex=re.compile(rf"ở\s+mức\s+{_NUM}\s*({_UNIT_SHORT})?", _I),
        comparison=Comparison.APPROXIMATELY,
        unit_group=2,
    ),
    # "ít nhất 5.000 km"
    KpiPattern(
        label="at_least",
        regex=re.compile(rf"ít\s+nhất\s+{_NUM}\s*({_UNIT_FULL})?", _I),
        comparison=Comparison.ABOVE,
        unit_group=2,
    ),
    # "có 3.000 km", "có 30 giường bệnh"
    KpiPattern(
        label="have",
        regex=re.compile(rf"\bcó\s+{_NUM}\s*(km|ha|%|MW|GW|giường\s+bệnh)", _I),
        comparison=Comparison.EXACT,
        unit_group=2,
    ),
    # bare "100%" (not "%/...")
    KpiPattern(
        label="bare_percent",
        regex=re.compile(r"\b(\d{2,3})\s*%(?!\s*/)", _I),
        comparison=Comparison.EXACT,
        default_unit="%",
    ),
    # "120 nghìn tỷ đồng", "2 triệu lượt"
    KpiPattern(
        label="amount_with_unit",
        regex=re.compile(
            rf"{_NUM}\s*(triệu\s+USD|tỷ\s+USD|nghìn\s+tỷ\s+đồng|tỷ\s+đồng|triệu\s+đồng|"
            r"nghìn\s+ha|triệu\s+ha|nghìn\s+người|triệu\s+người|triệu\s+lượt)",
            _I,
        ),
        comparison=Comparison.EXACT,
        unit_group=2,
    ),
    # "7.500 USD"
    KpiPattern(
        label="usd_amount",
        regex=re.compile(rf"{_NUM}\s+USD\b", _I),
        comparison=Comparison.EXACT,
        default_unit="USD",
    ),
]


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class UnitPattern:
    regex: re.Pattern[str]
    unit: str


def _u(pattern: str, unit: str, flags: int = _I) -> UnitPattern:
    return UnitPattern(regex=re.compile(pattern, flags), unit=unit)


UNIT_PATTERNS: list[UnitPattern] = [
    _u(r"\bnghìn\s+tỷ\s+đồng\b", "nghìn tỷ đồng"),
    _u(r"\btỷ\s+đồng\b", "tỷ đồng"),
    _u(r"\btriệu\s+đồng\b", "triệu đồng"),
    _u(r"\btriệu\s+USD\b", "triệu USD"),
    _u(r"\btỷ\s+USD\b", "tỷ USD"),
    _u(r"%/năm", "%/năm"),
    _u(r"%", "%"),
    _u(r"\bUSD\b", "USD"),
    _u(r"\bnghìn\s+ha\b", "nghìn ha"),
    _u(r"\btriệu\s+ha\b", "triệu ha"),
    _u(r"\bha\b", "ha"),
    _u(r"\bkm\b", "km"),
    _u(r"\bMW\b", "MW", re.UNICODE),
    _u(r"\bGW\b", "GW", re.UNICODE),
    _u(r"\bgiường\s+bệnh\b", "giường bệnh"),
    _u(r"\bbác\s+sĩ\b", "bác sĩ"),
    _u(r"\btriệu\s+người\b", "triệu người"),
    _u(r"\bnghìn\s+người\b", "nghìn người"),
    _u(r"\btriệu\s+lượt\b", "triệu lượt"),
    _u(r"\bngười\b", "người"),
    _u(r"\blao\s+động\b", "lao động"),
    _u(r"\bdân\s+số\b", "dân số"),
]


def detect_unit(text: str) -> str | None:
    for pat in UNIT_PATTERNS:
        if pat.regex.search(text):
            return pat.unit
    return None


def normalize_unit(hint: str) -> str | None:
    """Canonical form of a unit captured next to a numeral."""
    s = re.sub(r"\s+", " ", hint.strip()).lower()
    if not s:
        return None
    if s in ("%", "%/năm"):
        return s
    if "usd" in s:
        return "USD" if s == "usd" else s.replace("usd", "USD")
    if "km" in s:
        return "km"
    if s == "ha":
        return "ha"
    if "mw" in s:
        return "MW"
    if "gw" in s:
        return "GW"
    if "nghìn" in s or "triệu" in s or "tỷ" in s:
        return s
    if "ha" in s:
        return "ha"
    return hint.strip()


# ---------------------------------------------------------------------------
# Years
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class YearPattern:
    label: str
    regex: re.Pattern[str]
    year_group: int


PERIOD_RE = re.compile(r"giai\s+đoạn\s+(\d{4})\s*[-–]\s*(\d{4})", _I)

YEAR_PATTERNS: list[YearPattern] = [
    YearPattern("until_year", re.compile(r"đến\s+năm\s+(\d{4})", _I), 1),
    YearPattern("year", re.compile(r"năm\s+(\d{4})", _I), 1),
    YearPattern("period_end", PERIOD_RE, 2),
    YearPattern("bare_year", re.compile(r"\b(20\d{2})\b"), 1),
]


def find_year(text: str) -> int | None:
    for pat in YEAR_PATTERNS:
        m = pat.regex.search(text)
        if m:
            return int(m.group(pat.year_group))
    return None


def find_period(text: str) -> tuple[int, int] | None:
    m = PERIOD_RE.search(text)
    if m:
        return int(m.group(1)), int(m.group(2))
    return None


# ---------------------------------------------------------------------------
# Indicator names
# ---------------------------------------------------------------------------

_MIN_NAME_LEN = 3
_TRUNCATE_AT  = 80

_VERBS = r"đạt|trên|dưới|khoảng|ít\s+nhất|ở\s+mức|có|là|còn"

_BULLET_RE = re.compile(r"^[-+•]\s*")
_TOPIC_RE  = re.compile(r"^Về\s+[\w\s]+:\s*", _I)
_STRIVE_RE = re.compile(r"^\s*phấn\s+đấu\s+", _I)

# (a) common indicator phrasings, captured up to "đạt"
_NAMED_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"tốc\s+độ\s+tăng(?:\s+trưởng)?\s+[\w\s-]+?(?=\s+(?:bình\s+quân\s+)?đạt)", _I),
    re.compile(r"GDP\s+bình\s+quân\s+đầu\s+người[\w\s-]*?(?=\s+đạt)", _I),
    re.compile(r"tỷ\s+trọng[\w\s-]*?(?=\s+đạt)", _I),
    re.compile(r"tỷ\s+lệ[\w\s,()-]*?(?=\s+đạt)", _I),
]

# (b) any phrase opening the clause (or following . / ;) up to "đạt"
_BEFORE_REACH_RE = re.compile(r"(?:^|[.;]\s*)([^\W\d_][\w\s,()-]*?)(?=\s+đạt)", _I)

# (c) optional boilerplate, then the subject up to a comparison verb
_BEFORE_VERB_RE = re.compile(
    r"^[^.;]*?(?:(?:[-+•]\s*)?(?:Về\s+[\w\s]+:\s*)?(?:phấn\s+đấu\s+)?"
    r"(?:đến\s+năm\s+\d{4},?\s*)?(?:có\s+)?)"
    r"([\w\s,()-]+?)"
    r"(?=\s+(?:đạt|khoảng|trên|dưới|là|còn|tăng|giảm|ở\s+mức|ít\s+nhất|ổn\s+định)\s)",
    _I,
)
_BEFORE_NUMBER_RE = re.compile(rf"^(.+?)\s+(?:{_VERBS})\s+\d", _I)
_PREFIXES_RE: list[re.Pattern[str]] = [
    re.compile(r"^phấn\s+đấu\s+", _I),
    re.compile(r"^đến\s+năm\s+\d{4},?\s*", _I),
    re.compile(r"^có\s+", _I),
]

# (d) "... ít nhất 5.000 km đường bộ cao tốc" → "đường bộ cao tốc"
_AFTER_NUMBER_RE = re.compile(
    r"(?:đạt|trên|dưới|khoảng|ít\s+nhất|ở\s+mức|có)\s+\d[\d.,]*\s*"
    r"(?:%(?:/năm)?|USD|km|ha|MW|GW|triệu|tỷ|nghìn)?\s+([^\W\d_][\w\s]*)",
    _I,
)


def _clean_name(name: str) -> str:
    name = _BULLET_RE.sub("", name.strip())
    name = _TOPIC_RE.sub("", name)
    name = _STRIVE_RE.sub("", name)
    return name.strip()


def _name_from_named_patterns(clause: str) -> str | None:
    for regex in _NAMED_PATTERNS:
        m = regex.search(clause)
        if m:
            name = _clean_name(m.group(0))
            if len(name) > _MIN_NAME_LEN:
                return name
    return None


def _name_before_reach(clause: str) -> str | None:
    m = _BEFORE_REACH_RE.search(clause)
    if m:
        return _clean_name(m.group(1))
    return None


def _name_before_verb(clause: str) -> str | None:
    m = _BEFORE_VERB_RE.search(clause)
    if m:
        return m.group(1).strip()
    return None


def _name_before_number(clause: str) -> str | None:
    m = _BEFORE_NUMBER_RE.search(clause)
    if not m:
        return None
    name = _TOPIC_RE.sub("", _BULLET_RE.sub("", m.group(1))).strip()
    # prefixes may be stacked: "phấn đấu đến năm 2030, có ..."
    for _ in range(len(_PREFIXES_RE)):
        before = name
        for regex in _PREFIXES_RE:
            name = regex.sub("", name).strip()
        if name == before:
            break
    return name


def _name_after_number(clause: str) -> str | None:
    m = _AFTER_NUMBER_RE.search(clause)
    if m:
        return m.group(1).strip()
    return None


def _name_truncated(clause: str) -> str | None:
    s = clause.strip()
    if len(s) <= _TRUNCATE_AT:
        return s
    cut = re.sub(r"\s+\S*$", "", s[:_TRUNCATE_AT]).strip()
    return cut or s[:60]


@dataclass(frozen=True, slots=True)
class NameStrategy:
    label: str
    extract: Callable[[str], str | None]


NAME_STRATEGIES: list[NameStrategy] = [
    NameStrategy("named_indicator", _name_from_named_patterns),
    NameStrategy("before_reach", _name_before_reach),
    NameStrategy("before_verb", _name_before_verb),
    NameStrategy("before_number", _name_before_number),
    NameStrategy("after_number", _name_after_number),
]


def extract_name(clause: str) -> str:
    """First strategy giving more than 3 characters wins; else a truncation."""
    for strategy in NAME_STRATEGIES:
        name = strategy.extract(clause)
        if name and len(name) > _MIN_NAME_LEN:
            return name
    return _name_truncated(clause) or clause
