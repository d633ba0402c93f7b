"""
appendix/classify.py — appendix type from its title and first rows.

Matching is diacritic-insensitive: "Danh mục dự án" and "DANH MUC DU AN"
both hit PROJECT_LIST. Rules are tried in order; first hit wins.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass

from data_model import AppendixType


@dataclass(frozen=True, slots=True)
class TypeRule:
    keywords: tuple[str, ...]
    appendix_type: AppendixType


TYPE_RULES: list[TypeRule] = [
    TypeRule(("ban do",), AppendixType.MAP_LIST),
    TypeRule(("chi tieu", "chi so"), AppendixType.INDICATOR_TABLE),
    TypeRule(("tuyen", "duong"), AppendixType.ROUTE_TABLE),
    TypeRule(("co so", "thiet che"), AppendixType.FACILITY_LIST),
    TypeRule(("du an", "danh muc"), AppendixType.PROJECT_LIST),
]


def remove_diacritics(text: str) -> str:
    """NFD + combining marks dropped; đ/Đ has no decomposition, mapped by hand."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "D")


def classify_appendix_type(title: str, body_hint: str = "") -> AppendixType:
    haystack = remove_diacritics(f"{title} {body_hint}").lower()
    for rule in TYPE_RULES:
        if any(kw in haystack for kw in rule.keywords):
            return rule.appendix_type
    return AppendixType.MIXED
