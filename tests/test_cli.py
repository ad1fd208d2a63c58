"""
Test Suite for the CLI
======================
"""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from page_analyzer.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def dump(tmp_path):
    path = tmp_path / "exam.json"
    path.write_text(json.dumps({
        "pages": [
            [{"x": 72, "y": 100, "text": "Q1"}, {"x": 300, "y": 760, "text": "- 1 -"}],
            [{"x": 72, "y": 100, "text": "Q21"}, {"x": 72, "y": 300, "text": "Q3"},
             {"x": 300, "y": 760, "text": "- 3 -"}],
            [{"x": 72, "y": 100, "text": "Some text"}],
        ]
    }), encoding="utf-8")
    return str(path)


class TestAnalyzeCommand:

    def test_json_output(self, runner, dump):
        result = runner.invoke(cli, ["analyze", dump, "--json-output"])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert data["success"] is True
        doc = data["results"][0]
        assert doc["fileName"] == "exam.json"
        assert doc["printedPageSequence"] == [1, 3, None]
        assert doc["pageSummary"][1]["range"] == "21-3"
        assert doc["pageSummary"][2]["range"] is None

    def test_failed_document_sets_exit_code(self, runner, dump, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{", encoding="utf-8")

        result = runner.invoke(
            cli, ["analyze", dump, str(broken), "--json-output"]
        )
        assert result.exit_code == 1

        data = json.loads(result.stdout)
        assert data["success"] is False
        assert data["results"][0]["fileName"] == "exam.json"
        assert data["results"][1]["fileName"] == "broken.json"
        assert "error" in data["results"][1]

    def test_table_output(self, runner, dump):
        result = runner.invoke(cli, ["analyze", dump, "--log-level", "ERROR"])
        assert result.exit_code == 0
        assert "Sequence Report" in result.stdout
        assert "21-3" in result.stdout

    def test_writes_output_dir(self, runner, dump, tmp_path):
        out = tmp_path / "out"
        result = runner.invoke(
            cli, ["analyze", dump, "--json-output", "--output", str(out)]
        )
        assert result.exit_code == 0
        assert (out / "exam_analysis.json").exists()


class TestPositionCommand:

    def test_detected(self, runner, dump):
        result = runner.invoke(cli, ["position", dump])
        assert result.exit_code == 0
        assert "bottom" in result.stdout

    def test_none_found(self, runner, tmp_path):
        path = tmp_path / "plain.json"
        path.write_text(json.dumps({"pages": [[]]}), encoding="utf-8")
        result = runner.invoke(cli, ["position", str(path)])
        assert result.exit_code == 0
        assert "No page number position" in result.stdout


class TestInspectCommand:

    def test_saved_result(self, runner, dump, tmp_path):
        out = tmp_path / "out"
        runner.invoke(cli, ["analyze", dump, "--json-output", "--output", str(out)])

        result = runner.invoke(cli, ["inspect", str(out / "exam_analysis.json")])
        assert result.exit_code == 0
        assert "Question Jumps" in result.stdout

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli, ["inspect", str(path)])
        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert "Traceback" not in result.output

    def test_not_an_analysis_result(self, runner, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("{}", encoding="utf-8")

        result = runner.invoke(cli, ["inspect", str(path)])
        assert result.exit_code == 1
        assert "Error" in result.stdout
        assert not isinstance(result.exception, ValueError)

    def test_printed_numbers_row(self, runner, dump, tmp_path):
        out = tmp_path / "out"
        runner.invoke(cli, ["analyze", dump, "--json-output", "--output", str(out)])

        result = runner.invoke(cli, ["inspect", str(out / "exam_analysis.json")])
        assert "Printed Numbers Found" in result.stdout
