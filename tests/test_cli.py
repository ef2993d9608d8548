"""Tests for the l5ingest command line."""

import json

import pytest

from conftest import fixture_bytes
from l5ingest.cli import build_parser, main


@pytest.fixture
def markup_file(tmp_path):
    path = tmp_path / "two_programs.L5X"
    path.write_bytes(fixture_bytes("two_programs.L5X"))
    return path


@pytest.fixture
def text_file(tmp_path):
    path = tmp_path / "two_programs.L5K"
    path.write_bytes(fixture_bytes("two_programs.L5K"))
    return path


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_parse_flags(self):
        args = build_parser().parse_args(["parse", "x.L5X", "--json", "--parallel"])
        assert args.command == "parse"
        assert args.json and args.parallel


class TestParseCommand:
    def test_summary(self, markup_file, capsys):
        assert main(["parse", str(markup_file)]) == 0
        out = capsys.readouterr().out
        assert "Controller: LineCtrl (1756-L83E)" in out
        assert "Format:     L5X" in out
        counts = dict(line.split() for line in out.splitlines() if line.startswith("  "))
        assert counts["tags"] == "5"
        assert counts["rungs"] == "4"
        assert counts["tag_references"] == "8"

    def test_text_export(self, text_file, capsys):
        assert main(["parse", str(text_file), "--parallel"]) == 0
        assert "Format:     L5K" in capsys.readouterr().out

    def test_json(self, markup_file, capsys):
        assert main(["parse", str(markup_file), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["file_format"] == "l5x"
        assert payload["controller"]["name"] == "LineCtrl"
        assert len(payload["tag_references"]) == 8

    def test_missing_file(self, tmp_path, capsys):
        assert main(["parse", str(tmp_path / "absent.L5X")]) == 1
        assert capsys.readouterr().err.startswith("error: ")

    def test_rejected_extension(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        assert main(["parse", str(path)]) == 1
        assert "is not one of" in capsys.readouterr().err

    def test_malformed(self, tmp_path, capsys):
        path = tmp_path / "broken.L5X"
        path.write_bytes(fixture_bytes("two_programs.L5X")[:400])
        assert main(["parse", str(path)]) == 1
        assert "invalid markup" in capsys.readouterr().err

    def test_upload_limit_from_env(self, markup_file, monkeypatch, capsys):
        monkeypatch.setenv("L5INGEST_MAX_UPLOAD_BYTES", "100")
        assert main(["parse", str(markup_file)]) == 1
        assert "byte limit" in capsys.readouterr().err


class TestAnalyzeCommand:
    def test_report(self, markup_file, capsys):
        assert main(["analyze", str(markup_file)]) == 0
        out = capsys.readouterr().out
        assert "Health: 66/100 (tag efficiency 100, documentation 50, tag usage 32)" in out
        assert "Unused tags: 0 of 5" in out
        assert "Naming: 0 errors, 0 warnings, 0 info over 5 tags" in out
        assert "scope conflict: Speed shadowed in ProgramA, ProgramB" in out

    def test_rules_file(self, markup_file, tmp_path, capsys):
        rules = tmp_path / "naming.yaml"
        rules.write_text(
            "rules:\n"
            "  - name: Capitalized\n"
            "    pattern: '^[A-Z][a-z]+$'\n"
            "    severity: error\n",
            encoding="utf-8",
        )
        assert main(["analyze", str(markup_file), "--rules", str(rules)]) == 0
        out = capsys.readouterr().out
        assert "Naming: 1 errors, 0 warnings, 0 info over 5 tags" in out
        assert "[error] Controller/StartPB:" in out

    def test_skipped_rule_reported(self, markup_file, tmp_path, capsys):
        rules = tmp_path / "naming.yaml"
        rules.write_text("rules:\n  - name: Broken\n    pattern: '[A-Z'\n", encoding="utf-8")
        assert main(["analyze", str(markup_file), "--rules", str(rules)]) == 0
        assert "skipped rule 'Broken'" in capsys.readouterr().out

    def test_json(self, markup_file, capsys):
        assert main(["analyze", str(markup_file), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["health"]["scores"]["overall"] == 66
        assert payload["naming"]["scope_conflicts"][0]["tag_name"] == "Speed"

    def test_bad_rules_file(self, markup_file, tmp_path, capsys):
        rules = tmp_path / "naming.yaml"
        rules.write_text("- just a list\n", encoding="utf-8")
        assert main(["analyze", str(markup_file), "--rules", str(rules)]) == 1
        assert "'rules' list" in capsys.readouterr().err
