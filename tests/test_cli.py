"""Tests for the fixer CLI."""

import json
import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_log_setup():
    """Keep CLI invocations from reconfiguring the root logger."""
    with patch("cli.main.setup_logging") as mock_setup:
        yield mock_setup


@pytest.fixture
def input_files(tmp_path):
    chapters = [
        {"id": "ch-1", "number": 1, "content": "The cat sat on the mat."},
        {"id": "ch-2", "number": 2, "content": "The dog slept by the door."},
    ]
    fixes = [
        {"id": "f1", "chapterId": "ch-1", "chapterNumber": 1, "fixType": "grammar",
         "originalText": "The cat sat", "fixedText": "The cat lay", "issueId": "i1"},
        {"id": "f2", "chapterNumber": 2, "fixType": "continuity",
         "originalText": "A horse ran.", "fixedText": "A horse sat.", "issueId": "i2"},
        {"id": "f3", "chapterNumber": 2, "originalText": "door", "fixedText": "gate",
         "status": "rejected"},
    ]
    issues = [
        {"id": "i1", "type": "grammar", "severity": "minor", "autoFixable": True, "chapterNumber": 1},
        {"id": "i2", "type": "continuity", "severity": "major", "chapterNumber": 2,
         "description": "Horse appears from nowhere"},
    ]
    paths = {}
    for name, data in (("chapters", chapters), ("fixes", {"fixes": fixes}), ("issues", issues)):
        path = tmp_path / f"{name}.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        paths[name] = path
    return paths


class TestApplyCommand:
    def test_prints_json_result(self, runner, input_files):
        from cli.main import cli
        result = runner.invoke(cli, ["apply", str(input_files["chapters"]), str(input_files["fixes"])])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["chapters"][0]["content"] == "The cat lay on the mat."
        assert data["chapters"][1]["content"] == "The dog slept by the door."
        assert [f["id"] for f in data["applied_fixes"]] == ["f1"]
        assert data["failed_fixes"][0]["failure_reason"] == "not_found"

    def test_writes_output_file(self, runner, input_files, tmp_path):
        from cli.main import cli
        output = tmp_path / "result.json"
        result = runner.invoke(cli, [
            "apply", str(input_files["chapters"]), str(input_files["fixes"]), "-o", str(output),
        ])
        assert result.exit_code == 0, result.output
        assert "issue(s) found" in result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["modified_chapter_ids"] == ["ch-1"]

    def test_skip_failed_excludes_fix(self, runner, input_files):
        from cli.main import cli
        result = runner.invoke(cli, [
            "apply", str(input_files["chapters"]), str(input_files["fixes"]), "-s", "f1",
        ])
        data = json.loads(result.stdout)
        assert data["applied_fixes"] == []

    def test_concurrent_mode(self, runner, input_files):
        from cli.main import cli
        result = runner.invoke(cli, [
            "apply", str(input_files["chapters"]), str(input_files["fixes"]), "--concurrent",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["chapters"][0]["content"] == "The cat lay on the mat."

    def test_invalid_record_exits_nonzero(self, runner, input_files, tmp_path):
        from cli.main import cli
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps([{"id": "c", "number": "one"}]), encoding="utf-8")
        result = runner.invoke(cli, ["apply", str(bad), str(input_files["fixes"])])
        assert result.exit_code == 1
        assert "Invalid input" in result.output

    def test_verbose_sets_debug_logging(self, runner, input_files, no_log_setup):
        from cli.main import cli
        runner.invoke(cli, ["-v", "apply", str(input_files["chapters"]), str(input_files["fixes"])])
        assert no_log_setup.call_args.kwargs["level"] == logging.DEBUG


class TestClassifyCommand:
    def test_json_output(self, runner, input_files):
        from cli.main import cli
        result = runner.invoke(cli, [
            "classify", str(input_files["issues"]), str(input_files["fixes"]), "--json",
        ])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [f["id"] for f in data["auto_fixable"]] == ["f1"]
        approval_ids = [p["fix"]["id"] for p in data["requires_approval"]]
        assert approval_ids == ["f2", "f3"]
        assert data["requires_approval"][0]["issue"]["description"] == "Horse appears from nowhere"

    def test_table_output(self, runner, input_files):
        from cli.main import cli
        result = runner.invoke(cli, ["classify", str(input_files["issues"]), str(input_files["fixes"])])
        assert result.exit_code == 0, result.output
        assert "1 auto-fixable" in result.output
        assert "2 require approval" in result.output


class TestLocateCommand:
    def test_found(self, runner, tmp_path):
        from cli.main import cli
        chapter = tmp_path / "chapter.txt"
        chapter.write_text("Intro.  The   cat\nsat.  Outro.", encoding="utf-8")
        result = runner.invoke(cli, ["locate", str(chapter), "The cat sat."])
        assert result.exit_code == 0, result.output
        assert "whitespace_normalized" in result.output

    def test_not_found(self, runner, tmp_path):
        from cli.main import cli
        chapter = tmp_path / "chapter.txt"
        chapter.write_text("Nothing here.", encoding="utf-8")
        result = runner.invoke(cli, ["locate", str(chapter), "A horse ran."])
        assert result.exit_code == 1
        assert "Not found" in result.output


class TestConfiguration:
    def test_invalid_settings_exit_nonzero(self, runner, input_files, monkeypatch, tmp_path):
        from cli.main import cli
        from config import settings as settings_module
        monkeypatch.setattr(settings_module, "_settings_instance", None)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MAX_WORKERS", "0")
        result = runner.invoke(cli, ["apply", str(input_files["chapters"]), str(input_files["fixes"])])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
