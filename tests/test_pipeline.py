"""Pipeline orchestration with fake extractors; JSON sink and batch manifests on tmp_path."""

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from data_model import ParseStatus, Stage
from extraction import ExtractionError
from pipeline import (
    Collaborators,
    DocumentType,
    JsonFileSink,
    ManifestError,
    PipelineOptions,
    PlanLevel,
    build_records,
    document_file_name,
    dry_run_summary,
    load_manifest,
    run_batch,
    run_pipeline,
)

DOCUMENT = """QUỐC HỘI
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
PHỤ LỤC I
DANH MỤC DỰ ÁN

STT | Tên dự án
1 | Cao tốc Bắc - Nam
"""

HTML = """<p>PHỤ LỤC I</p><p>DANH MỤC DỰ ÁN</p>
<table><tr><th>STT</th><th>Tên dự án</th></tr><tr><td>1</td><td>Cao tốc</td></tr>
<tr><td>2</td><td>Sân bay</td></tr></table>"""

SCANNED = "-- 1 of 3 --\n\n-- 2 of 3 --\n\n-- 3 of 3 --"


@dataclass
class FakeExtractors:
    text: str = DOCUMENT
    html: str = ""
    ocr: str | None = None
    text_error: str | None = None
    html_error: str | None = None
    ocr_error: str = "tesseract is not available"
    missing: bool = False
    work_dirs: list[tuple[Path, bool]] = field(default_factory=list)

    def resolve(self, path: Path, work_dir: Path) -> Path:
        self.work_dirs.append((work_dir, work_dir.is_dir()))
        if self.missing:
            raise ExtractionError(f"File not found: {path}")
        return path

    def extract_text(self, path: Path) -> str:
        if self.text_error:
            raise ExtractionError(self.text_error)
        return self.text

    def extract_html(self, path: Path) -> str:
        if self.html_error:
            raise ExtractionError(self.html_error)
        return self.html

    def extract_ocr(self, path: Path, max_pages: int) -> str:
        if self.ocr is None:
            raise ExtractionError(self.ocr_error)
        return self.ocr

    def collaborators(self) -> Collaborators:
        return Collaborators(
            resolve_file=self.resolve,
            extract_text=self.extract_text,
            extract_html=self.extract_html,
            extract_ocr=self.extract_ocr,
        )


def _options(name: str = "nq-81.txt", **kwargs) -> PipelineOptions:
    kwargs.setdefault("min_text_length", 50)
    return PipelineOptions(
        file_path=Path(name),
        document_number="81/2023/QH15",
        document_type=DocumentType.NGHI_QUYET,
        issuing_body="Quốc hội",
        **kwargs,
    )


class RecordingSink:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.written = []

    def write(self, result, options):
        if self.error is not None:
            raise self.error
        self.written.append(result)
        return "doc-1"


class TestRunPipeline:

    def setup_method(self):
        self.fake = FakeExtractors()

    def test_complete_document(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        result = run_pipeline(_options(), collaborators=self.fake.collaborators())

        assert result.status is ParseStatus.COMPLETED
        assert result.errors == []
        assert not result.used_ocr
        assert result.sections_count == 8
        assert result.document.signature_block.startswith("CHỦ TỊCH QUỐC HỘI")
        assert list(result.targets_by_section) == ["DASH::4", "DASH::5", "LETTER:b:6"]
        assert result.targets_count == 3
        assert len(result.appendices) == 1
        assert result.appendices[0].rows[0].data == {"STT": 1, "Tên dự án": "Cao tốc Bắc - Nam"}

    def test_parallel_extraction_keeps_document_order(self):
        serial = run_pipeline(_options(), collaborators=self.fake.collaborators())
        parallel = run_pipeline(_options(max_workers=4), collaborators=self.fake.collaborators())
        assert list(parallel.targets_by_section) == list(serial.targets_by_section)
        assert parallel.targets_by_section == serial.targets_by_section

    def test_html_used_for_word_documents(self):
        self.fake.html = HTML
        result = run_pipeline(_options("nq-81.docx"), collaborators=self.fake.collaborators())
        assert [r.row_number for r in result.appendices[0].rows] == [1, 2]

    def test_html_failure_falls_back_to_plain_text(self):
        self.fake.html_error = "broken docx"
        result = run_pipeline(_options("nq-81.docx"), collaborators=self.fake.collaborators())
        assert result.status is ParseStatus.COMPLETED
        assert result.errors == []
        assert len(result.appendices[0].rows) == 1

    def test_ocr_fallback_for_scanned_pdf(self):
        self.fake.text = SCANNED
        self.fake.ocr = DOCUMENT
        result = run_pipeline(_options("nq-81.pdf"), collaborators=self.fake.collaborators())
        assert result.used_ocr
        assert result.status is ParseStatus.COMPLETED
        assert [e.stage for e in result.errors] == [Stage.OCR]
        assert result.targets_count == 3

    def test_scanned_pdf_without_ocr_is_skipped(self):
        self.fake.text = SCANNED
        result = run_pipeline(_options("nq-81.pdf"), collaborators=self.fake.collaborators())
        assert result.skipped
        assert result.status is ParseStatus.FAILED
        assert "too short" in result.skip_reason
        assert [e.stage for e in result.errors] == [Stage.OCR, Stage.EXTRACT_TEXT]

    def test_no_ocr_for_non_pdf(self):
        self.fake.text = "ngắn"
        self.fake.ocr = DOCUMENT
        result = run_pipeline(_options("nq-81.txt"), collaborators=self.fake.collaborators())
        assert result.skipped
        assert not result.used_ocr

    def test_missing_file(self):
        self.fake.missing = True
        sink = RecordingSink()
        result = run_pipeline(_options(), collaborators=self.fake.collaborators(), sink=sink)
        assert result.status is ParseStatus.FAILED
        assert result.errors[0].stage is Stage.EXTRACT_TEXT
        assert sink.written == []

    def test_text_error_recorded(self):
        self.fake.text_error = "cannot decode"
        result = run_pipeline(_options(), collaborators=self.fake.collaborators())
        assert result.skipped
        assert result.errors[0].message == "Text extraction failed: cannot decode"

    def test_failing_leaf_does_not_stop_others(self, monkeypatch):
        class Flaky:
            name = "flaky"

            def extract(self, text):
                if "đô thị" in text:
                    raise RuntimeError("boom")
                return []

        monkeypatch.setattr("pipeline.orchestrator.select_strategy", lambda *a, **kw: Flaky())
        result = run_pipeline(_options(), collaborators=self.fake.collaborators())
        assert result.status is ParseStatus.COMPLETED
        assert len(result.errors) == 1
        error = result.errors[0]
        assert error.stage is Stage.TARGETS
        assert error.section_key == "LETTER:b:6"
        assert "boom" in error.message

    def test_sink_called_unless_dry_run(self):
        sink = RecordingSink()
        result = run_pipeline(_options(), collaborators=self.fake.collaborators(), sink=sink)
        assert result.document_id == "doc-1"
        assert len(sink.written) == 1

        sink = RecordingSink()
        result = run_pipeline(_options(dry_run=True), collaborators=self.fake.collaborators(), sink=sink)
        assert result.document_id is None
        assert sink.written == []

    def test_persist_failure_recorded(self):
        sink = RecordingSink(OSError("disk full"))
        result = run_pipeline(_options(), collaborators=self.fake.collaborators(), sink=sink)
        assert [e.stage for e in result.errors] == [Stage.PERSIST]
        assert result.status is ParseStatus.COMPLETED

    def test_any_sink_exception_recorded(self):
        sink = RecordingSink(KeyError("document_number"))
        result = run_pipeline(_options(), collaborators=self.fake.collaborators(), sink=sink)
        assert [e.stage for e in result.errors] == [Stage.PERSIST]
        assert "document_number" in result.errors[0].message
        assert result.document_id is None
        assert result.status is ParseStatus.COMPLETED

    def test_conversion_dir_removed_after_text_step(self):
        run_pipeline(_options("qd.doc"), collaborators=self.fake.collaborators())
        [(work_dir, existed)] = self.fake.work_dirs
        assert existed
        assert not work_dir.exists()

    def test_conversion_dir_removed_when_file_missing(self):
        self.fake.missing = True
        run_pipeline(_options(), collaborators=self.fake.collaborators())
        [(work_dir, _)] = self.fake.work_dirs
        assert not work_dir.exists()

    def test_ocr_page_failure_recorded(self):
        self.fake.text = SCANNED
        self.fake.ocr_error = "OCR failed on page 2: cannot render page"
        result = run_pipeline(_options("nq-81.pdf"), collaborators=self.fake.collaborators())
        assert result.status is ParseStatus.FAILED
        assert not result.used_ocr
        assert result.errors[0].stage is Stage.OCR
        assert result.errors[0].message == "OCR fallback failed: OCR failed on page 2: cannot render page"


class TestRecords:

    def test_build_records(self):
        options = _options(issued_date=date(2023, 1, 9), signed_by="Vương Đình Huệ")
        result = run_pipeline(options, collaborators=FakeExtractors().collaborators())
        records = build_records(result, options)

        doc = records["document"]
        assert doc["document_type"] == "NGHI_QUYET"
        assert doc["plan_level"] == "NATIONAL"
        assert doc["issued_date"] == "2023-01-09"
        assert doc["parse_status"] == "COMPLETED"
        assert doc["parse_errors"] is None

        sections = records["sections"]
        assert len(sections) == 8
        ids = {s["id"] for s in sections}
        assert sections[0]["parent_id"] is None
        assert all(s["parent_id"] in ids for s in sections[1:] if s["level"] != "DIEU")
        assert all(s["document_id"] == doc["id"] for s in sections)

        assert len(records["targets"]) == 3
        assert all(t["section_id"] in ids for t in records["targets"])
        assert records["appendices"][0]["rows"][0]["row_number"] == 1

    def test_plan_level(self):
        assert _options().effective_plan_level is PlanLevel.NATIONAL
        assert _options(plan_level=PlanLevel.SECTOR).effective_plan_level is PlanLevel.SECTOR
        decision = PipelineOptions(file_path=Path("qd.pdf"), document_number="1/QĐ-TTg")
        assert decision.effective_plan_level is PlanLevel.REGIONAL

    def test_dry_run_summary(self):
        options = _options(dry_run=True)
        result = run_pipeline(options, collaborators=FakeExtractors().collaborators())
        summary = dry_run_summary(result, options)
        assert summary["sections_count"] == 8
        assert summary["targets_count"] == 3
        assert summary["sections"][0]["level"] == "DIEU"
        json.dumps(summary, ensure_ascii=False)


class TestJsonFileSink:

    def test_file_name(self):
        assert document_file_name("81/2023/QH15") == "81_2023_QH15.json"
        assert document_file_name("///") == "document.json"

    def test_writes_into_directory(self, tmp_path):
        sink = JsonFileSink(tmp_path / "out")
        options = _options()
        result = run_pipeline(options, collaborators=FakeExtractors().collaborators(), sink=sink)

        out = tmp_path / "out" / "81_2023_QH15.json"
        assert out.exists()
        assert sink.exists("81/2023/QH15")
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["document"]["id"] == result.document_id
        assert data["document"]["document_number"] == "81/2023/QH15"

    def test_explicit_json_path(self, tmp_path):
        sink = JsonFileSink(tmp_path / "result.json")
        assert sink.target_for("anything") == tmp_path / "result.json"


def _write_manifest(tmp_path: Path, files: list[dict], **extra) -> Path:
    manifest = tmp_path / "manifest.json"
    manifest.write_text(json.dumps({"files": files, **extra}, ensure_ascii=False), encoding="utf-8")
    return manifest


class TestManifest:

    def test_load_with_defaults(self, tmp_path):
        path = _write_manifest(
            tmp_path,
            [
                {"file": "a.txt", "number": "1/QĐ-TTg", "date": "2023-10-20"},
                {"file": "b.txt", "number": "81/2023/QH15", "type": "NGHI_QUYET", "skip": True},
            ],
            baseDir="docs",
            defaultLevel="REGIONAL",
            defaultBody="Thủ tướng Chính phủ",
        )
        manifest = load_manifest(path)
        first, second = manifest.entries
        assert manifest.base_dir == (tmp_path / "docs").resolve()
        assert first.file == manifest.base_dir / "a.txt"
        assert first.issued_date == date(2023, 10, 20)
        assert first.document_type is DocumentType.QUYET_DINH
        assert first.plan_level is PlanLevel.REGIONAL
        assert first.issuing_body == "Thủ tướng Chính phủ"
        assert second.document_type is DocumentType.NGHI_QUYET
        assert manifest.active == [first]

    def test_missing_fields(self, tmp_path):
        with pytest.raises(ManifestError):
            load_manifest(_write_manifest(tmp_path, [{"file": "a.txt"}]))

    def test_invalid_date(self, tmp_path):
        with pytest.raises(ManifestError, match="date"):
            load_manifest(_write_manifest(tmp_path, [{"file": "a.txt", "number": "1", "date": "20/10/2023"}]))

    def test_invalid_type(self, tmp_path):
        with pytest.raises(ManifestError):
            load_manifest(_write_manifest(tmp_path, [{"file": "a.txt", "number": "1", "type": "LUAT"}]))

    def test_not_json(self, tmp_path):
        bad = tmp_path / "manifest.json"
        bad.write_text("{", encoding="utf-8")
        with pytest.raises(ManifestError):
            load_manifest(bad)

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestError):
            load_manifest(tmp_path / "nope.json")


class TestRunBatch:

    def setup_method(self):
        self.template = PipelineOptions(file_path=Path("."), document_number="", min_text_length=50)

    def test_batch_with_real_text_files(self, tmp_path):
        (tmp_path / "nq.txt").write_text(DOCUMENT, encoding="utf-8")
        manifest = load_manifest(_write_manifest(tmp_path, [
            {"file": "nq.txt", "number": "81/2023/QH15", "type": "NGHI_QUYET"},
            {"file": "missing.txt", "number": "2/QĐ-TTg"},
        ]))
        sink = JsonFileSink(tmp_path / "out")

        items = run_batch(manifest, self.template, sink=sink)
        assert [i.result.status for i in items] == [ParseStatus.COMPLETED, ParseStatus.FAILED]
        assert items[0].result.targets_count == 3
        assert (tmp_path / "out" / "81_2023_QH15.json").exists()

    def test_existing_output_skipped_unless_forced(self, tmp_path):
        (tmp_path / "nq.txt").write_text(DOCUMENT, encoding="utf-8")
        manifest = load_manifest(_write_manifest(tmp_path, [
            {"file": "nq.txt", "number": "81/2023/QH15"},
        ]))
        sink = JsonFileSink(tmp_path / "out")
        run_batch(manifest, self.template, sink=sink)

        again = run_batch(manifest, self.template, sink=sink)
        assert again[0].result.skipped
        assert "output exists" in again[0].result.skip_reason

        forced = run_batch(manifest, self.template, sink=sink, force=True)
        assert not forced[0].result.skipped
        assert forced[0].result.status is ParseStatus.COMPLETED
