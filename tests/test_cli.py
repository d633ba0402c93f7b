"""vnp command line: sub-commands on small text files."""

import json

import pytest

from vnp.cli import build_parser, main

from test_pipeline import DOCUMENT

LONG_DOCUMENT = DOCUMENT.replace(
    "Chính phủ tổ chức thực hiện Nghị quyết này.",
    "Chính phủ tổ chức thực hiện Nghị quyết này. " * 20,
)


@pytest.fixture
def doc_file(tmp_path):
    path = tmp_path / "nq-81.txt"
    path.write_text(LONG_DOCUMENT, encoding="utf-8")
    return path


class TestParser:

    def test_commands_registered(self):
        parser = build_parser()
        assert parser.parse_args(["structure", "a.txt"]).command == "structure"
        assert parser.parse_args(["targets", "--demo"]).command == "targets"
        assert parser.parse_args(["appendix", "a.docx"]).command == "appendix"
        assert parser.parse_args(["batch", "--manifest", "m.json"]).command == "batch"
        args = parser.parse_args(["parse", "x.pdf", "--number", "1/QĐ-TTg"])
        assert args.command == "parse"
        assert args.workers == 1
        assert args.type == "QUYET_DINH"

    def test_parse_requires_number(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["parse", "x.pdf"])


class TestCommands:

    def test_targets_demo_json(self, capsys):
        main(["targets", "--demo", "--json"])
        data = json.loads(capsys.readouterr().out)
        units = {t["unit"] for t in data}
        assert "USD" in units
        assert all(t["target_type"] == "QUANTITATIVE" for t in data)

    def test_targets_table(self, capsys, doc_file):
        main(["targets", str(doc_file)])
        out = capsys.readouterr().out
        assert "3 targets" in out

    def test_targets_needs_input(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["targets"])
        assert exc.value.code == 1

    def test_structure_json(self, capsys, doc_file):
        main(["structure", str(doc_file), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert [s["number"] for s in data["sections"]] == ["1", "2"]

    def test_structure_tree(self, capsys, doc_file):
        main(["structure", str(doc_file), "--tree"])
        out = capsys.readouterr().out
        assert "=== SECTIONS ===" in out
        assert "8 sections" in out

    def test_appendix_json(self, capsys, doc_file):
        main(["appendix", str(doc_file), "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data[0]["appendix_number"] == 1
        assert data[0]["rows"][0]["data"]["Tên dự án"] == "Cao tốc Bắc - Nam"

    def test_missing_file(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["structure", str(tmp_path / "nope.txt")])
        assert exc.value.code == 1

    def test_parse_writes_json(self, capsys, doc_file, tmp_path, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        out_dir = tmp_path / "out"
        main([
            "parse", str(doc_file),
            "--number", "81/2023/QH15",
            "--type", "NGHI_QUYET",
            "--date", "2023-01-09",
            "--out", str(out_dir),
        ])
        data = json.loads((out_dir / "81_2023_QH15.json").read_text(encoding="utf-8"))
        assert data["document"]["plan_level"] == "NATIONAL"
        assert len(data["targets"]) == 3
        assert "COMPLETED" in capsys.readouterr().out

    def test_parse_dry_run(self, capsys, doc_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        main(["parse", str(doc_file), "--number", "81/2023/QH15", "--dry-run"])
        assert "targets_count" in capsys.readouterr().out
        assert not (tmp_path / "output").exists()

    def test_parse_short_text_fails(self, tmp_path):
        short = tmp_path / "short.txt"
        short.write_text("Điều 1. Ngắn.", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main(["parse", str(short), "--number", "1/QĐ-TTg", "--dry-run"])
        assert exc.value.code == 1

    def test_parse_invalid_date(self, doc_file):
        with pytest.raises(SystemExit) as exc:
            main(["parse", str(doc_file), "--number", "1", "--date", "09/01/2023"])
        assert exc.value.code == 1

    def test_batch(self, capsys, doc_file, tmp_path):
        manifest = tmp_path / "manifest.json"
        manifest.write_text(json.dumps({
            "files": [{"file": doc_file.name, "number": "81/2023/QH15", "type": "NGHI_QUYET"}],
        }), encoding="utf-8")
        main(["batch", "--manifest", str(manifest), "--out-dir", str(tmp_path / "out")])
        assert (tmp_path / "out" / "81_2023_QH15.json").exists()
        assert "1 parsed" in capsys.readouterr().out

    def test_batch_bad_manifest(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["batch", "--manifest", str(tmp_path / "missing.json")])
        assert exc.value.code == 1
