"""Section tree: preamble/signature boundaries, nesting and leaf collection."""

import unicodedata

import pytest

from data_model import SectionLevel
from structure import (
    collect_leaf_sections,
    count_by_level,
    flatten_sections,
    parse_structure,
    pretty_print,
)
from structure.section_patterns import match_line
from structure.text_cleaner import meaningful_text_length, normalize_text

RESOLUTION = """QUỐC HỘI
Nghị quyết số 81/2023/QH15
QUỐC HỘI QUYẾT NGHỊ:
Điều 1. Phê duyệt Quy hoạch tổng thể quốc gia
1. Mục tiêu tổng quát
Đến năm 2030, Việt Nam là nước đang phát triển có công nghiệp hiện đại.
2. Mục tiêu cụ thể
a) Về kinh tế
- Tốc độ tăng trưởng GDP bình quân đạt khoảng 7,0%/năm.
- GDP bình quân đầu người đạt khoảng 7.500 USD.
b) Về xã hội
Tỷ lệ đô thị hóa đạt trên 50%.
Điều 2. Tổ chức thực hiện
Chính phủ tổ chức thực hiện Nghị quyết này.
CHỦ TỊCH QUỐC HỘI
Vương Đình Huệ
"""

DECISION = """THỦ TƯỚNG CHÍNH PHỦ
QUYẾT ĐỊNH:
Điều 1. Phê duyệt Quy hoạch vùng
I. PHẠM VI
Vùng gồm 14 tỉnh.
II. MỤC TIÊU
1. Mục tiêu chung
Phát triển nhanh và bền vững.
III. ĐỊNH HƯỚNG
Điều 2. Hiệu lực
Quyết định có hiệu lực từ ngày ký.
Nơi nhận:
- Ban Bí thư
"""


class TestParseStructure:

    def test_preamble_includes_marker_line(self):
        doc = parse_structure(RESOLUTION)
        assert doc.preamble.endswith("QUỐC HỘI QUYẾT NGHỊ:")
        assert doc.preamble.startswith("QUỐC HỘI")

    def test_signature_block(self):
        doc = parse_structure(RESOLUTION)
        assert doc.signature_block.startswith("CHỦ TỊCH QUỐC HỘI")
        assert "Vương Đình Huệ" in doc.signature_block

    def test_dieu_roots(self):
        doc = parse_structure(RESOLUTION)
        assert [s.level for s in doc.sections] == [SectionLevel.DIEU, SectionLevel.DIEU]
        assert [s.number for s in doc.sections] == ["1", "2"]
        assert doc.sections[0].title == "Phê duyệt Quy hoạch tổng thể quốc gia"

    def test_national_chain_skips_roman(self):
        dieu1 = parse_structure(RESOLUTION).sections[0]
        assert [c.level for c in dieu1.children] == [SectionLevel.ARABIC, SectionLevel.ARABIC]
        item2 = dieu1.children[1]
        assert [c.number for c in item2.children] == ["a", "b"]
        dashes = item2.children[0].children
        assert [d.level for d in dashes] == [SectionLevel.DASH, SectionLevel.DASH]

    def test_dash_text_goes_to_content(self):
        dieu1 = parse_structure(RESOLUTION).sections[0]
        dash = dieu1.children[1].children[0].children[0]
        assert dash.title is None
        assert dash.number == ""
        assert dash.content == "Tốc độ tăng trưởng GDP bình quân đạt khoảng 7,0%/năm."

    def test_body_lines_extend_innermost_section(self):
        dieu1 = parse_structure(RESOLUTION).sections[0]
        letter_b = dieu1.children[1].children[1]
        assert letter_b.content == "Tỷ lệ đô thị hóa đạt trên 50%."

    def test_full_chain_with_roman(self):
        doc = parse_structure(DECISION)
        dieu1 = doc.sections[0]
        assert [c.level for c in dieu1.children] == [SectionLevel.ROMAN] * 3
        assert [c.number for c in dieu1.children] == ["I", "II", "III"]
        assert dieu1.children[1].children[0].level is SectionLevel.ARABIC

    def test_noi_nhan_starts_signature(self):
        doc = parse_structure(DECISION)
        assert doc.signature_block.startswith("Nơi nhận:")
        assert doc.sections[1].content == "Quyết định có hiệu lực từ ngày ký."

    def test_sort_order_unique_and_increasing(self):
        flat = flatten_sections(parse_structure(RESOLUTION).sections)
        orders = [f.section.sort_order for f in flat]
        assert orders == list(range(len(flat)))

    def test_section_key(self):
        dieu1 = parse_structure(RESOLUTION).sections[0]
        assert dieu1.key == "DIEU:1:0"

    def test_no_dieu_is_degraded_not_error(self):
        doc = parse_structure("1. Mục một\nnội dung\n2. Mục hai\n")
        assert doc.preamble == ""
        assert doc.signature_block == ""
        assert [s.number for s in doc.sections] == ["1", "2"]

    def test_orphan_lines_dropped(self):
        doc = parse_structure("dòng mồ côi\n1. Mục một\n")
        assert len(doc.sections) == 1
        assert doc.sections[0].content == ""

    def test_empty_text(self):
        doc = parse_structure("")
        assert doc.sections == []


class TestTreeHelpers:

    def test_flatten_depths(self):
        flat = flatten_sections(parse_structure(RESOLUTION).sections)
        assert flat[0].depth == 0
        assert flat[1].depth == 1
        assert max(f.depth for f in flat) == 3

    def test_leaves_skip_blank_content(self):
        leaves = collect_leaf_sections(parse_structure(DECISION).sections)
        # "III. ĐỊNH HƯỚNG" has no children and no content
        assert all(s.content.strip() for s in leaves)
        assert all(s.is_leaf for s in leaves)
        assert "III" not in [s.number for s in leaves]

    def test_count_by_level(self):
        counts = count_by_level(parse_structure(RESOLUTION).sections)
        assert counts[SectionLevel.DIEU] == 2
        assert counts[SectionLevel.ARABIC] == 2
        assert counts[SectionLevel.LETTER] == 2
        assert counts[SectionLevel.DASH] == 2

    def test_pretty_print(self):
        out = pretty_print(parse_structure(RESOLUTION))
        assert "=== PREAMBLE ===" in out
        assert "[DIEU 1] - Phê duyệt Quy hoạch tổng thể quốc gia" in out
        assert "=== SIGNATURE BLOCK ===" in out


JUMBLED = """QUYẾT ĐỊNH:
- gạch đầu dòng trước Điều
Điều 1. Một
a) chữ cái trước số
1. số sau chữ cái
II. La Mã sau số
- gạch đầu dòng
nội dung
Điều 2. Hai
"""


def _walk(sections, parent=None):
    for s in sections:
        yield parent, s
        yield from _walk(s.children, s)


def _body_heading_lines(text: str) -> int:
    doc = parse_structure(text)
    lines = normalize_text(text).splitlines()
    head = len(doc.preamble.splitlines())
    tail = len(doc.signature_block.splitlines())
    body = lines[head:len(lines) - tail]
    return sum(1 for line in body if line.strip() and match_line(line.strip()))


@pytest.mark.parametrize("text", [RESOLUTION, DECISION, JUMBLED, "1. Mục một\nnội dung\n2. Mục hai\n"])
class TestTreeInvariants:

    def test_children_nest_strictly_deeper(self, text):
        for parent, child in _walk(parse_structure(text).sections):
            if parent is not None:
                assert child.level.priority > parent.level.priority, (parent.key, child.key)

    def test_every_heading_line_becomes_a_section(self, text):
        flat = flatten_sections(parse_structure(text).sections)
        assert len(flat) == _body_heading_lines(text)


class TestTextCleaner:

    def test_nfc_and_newlines(self):
        decomposed = unicodedata.normalize("NFD", "Quyết") + "\r\nđịnh\u00a0x"
        assert normalize_text(decomposed) == "Quyết\nđịnh x"

    def test_meaningful_length_ignores_page_markers(self):
        assert meaningful_text_length("-- 1 of 43 --\n\n-- 2 of 43 --") == 0
        assert meaningful_text_length("  abc   def \n") == 7
