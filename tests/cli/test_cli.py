"""Tests for the claims-timeline command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from claims_timeline.cli import app

runner = CliRunner()


class TestParseCommand:
    """Tests for `claims-timeline parse`."""

    def test_writes_output_file(self, write_json, rx_document, tmp_path):
        out = tmp_path / "out" / "timeline.json"
        result = runner.invoke(app, ["parse", str(write_json(rx_document)), "--output", str(out)])
        assert result.exit_code == 0, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["metadata"] == {"totalClaims": 1, "claimTypes": ["rxTba"]}
        assert data["claims"][0]["startDate"] == "2024-01-15"
        assert data["claims"][0]["endDate"] == "2024-02-14"

    def test_json_mode(self, write_json, rx_document):
        result = runner.invoke(app, ["--json", "-q", "parse", str(write_json(rx_document))])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["strategy"] == "fixed_schema"
        assert data["timeline"]["claims"][0]["id"] == "rx1"

    def test_date_format_option(self, write_json, tmp_path):
        path = write_json({"rxTba": [{"id": "x", "dos": "01/15/2024", "dayssupply": 1}]})
        out = tmp_path / "timeline.json"
        result = runner.invoke(app, ["parse", str(path), "--date-format", "MM/DD/YYYY", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["claims"][0]["startDate"] == "2024-01-15"

    def test_unsupported_date_format(self, write_json, rx_document):
        result = runner.invoke(app, ["parse", str(write_json(rx_document)), "--date-format", "YYYYMMDD"])
        assert result.exit_code == 1
        assert "CONFIGURATION" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "absent.json")])
        assert result.exit_code == 1
        assert "FILE_ACCESS" in result.output

    def test_all_strategies_fail(self, write_json):
        result = runner.invoke(app, ["parse", str(write_json({"unrelated": "data"}))])
        assert result.exit_code == 1
        assert "ALL_STRATEGIES_FAILED" in result.output

    def test_config_file(self, write_json, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("rxTbaPath: pending\n", encoding="utf-8")
        path = write_json({"pending": [{"id": "p", "dos": "2024-01-01", "dayssupply": 2}]})
        out = tmp_path / "timeline.json"
        result = runner.invoke(app, ["parse", str(path), "-c", str(config), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8"))["claims"][0]["id"] == "p"


class TestValidateCommand:
    """Tests for `claims-timeline validate`."""

    def test_valid(self, write_json, mixed_document):
        result = runner.invoke(app, ["--json", "validate", str(write_json(mixed_document))])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["found"] == {"rxTba": 2, "rxHistory": 1, "medHistory": 1}

    def test_invalid(self, write_json):
        result = runner.invoke(app, ["validate", str(write_json({"unrelated": "data"}))])
        assert result.exit_code == 1
        assert "STRUCTURE_VALIDATION" in result.output


class TestStrategyCommand:
    """Tests for `claims-timeline strategy`."""

    def test_reports_strategy(self, write_json, rx_document):
        result = runner.invoke(app, ["--json", "strategy", str(write_json(rx_document))])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["strategy"] == "fixed_schema"

    def test_none_exits_1(self, write_json):
        result = runner.invoke(app, ["strategy", str(write_json({"unrelated": "data"}))])
        assert result.exit_code == 1


class TestBatchCommand:
    """Tests for `claims-timeline batch`."""

    @pytest.fixture
    def folder(self, write_json, rx_document, med_document):
        write_json(rx_document, name="in/rx.json")
        write_json(med_document, name="in/med.json")
        return write_json({"unrelated": "data"}, name="in/other.json").parent

    def test_writes_one_timeline_per_claims_file(self, folder, tmp_path):
        out_dir = tmp_path / "out"
        result = runner.invoke(app, ["-q", "batch", str(folder), "-o", str(out_dir), "-w", "2"])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in out_dir.iterdir()) == ["med-timeline.json", "rx-timeline.json"]
        med = json.loads((out_dir / "med-timeline.json").read_text(encoding="utf-8"))
        assert med["claims"][0]["id"] == "l1"

    def test_failed_file_exits_1(self, folder, write_json, tmp_path):
        write_json({"rxTba": ["not a claim"]}, name="in/broken.json")
        result = runner.invoke(app, ["-q", "batch", str(folder), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert (tmp_path / "out" / "rx-timeline.json").exists()

    def test_no_claims_files(self, write_json, tmp_path):
        folder = write_json({"unrelated": "data"}, name="empty/x.json").parent
        result = runner.invoke(app, ["batch", str(folder)])
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for `claims-timeline config`."""

    def test_init_then_check(self, tmp_path):
        path = tmp_path / "config.yaml"
        assert runner.invoke(app, ["config", "init", str(path)]).exit_code == 0
        assert path.exists()
        result = runner.invoke(app, ["--json", "config", "check", str(path)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["claim_types"] == 3

    def test_init_refuses_overwrite(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("{}\n", encoding="utf-8")
        assert runner.invoke(app, ["config", "init", str(path)]).exit_code == 1
        assert runner.invoke(app, ["config", "init", str(path), "--force"]).exit_code == 0

    def test_check_reports_problems(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("colors:\n  rxTba: pink\n", encoding="utf-8")
        result = runner.invoke(app, ["config", "check", str(path)])
        assert result.exit_code == 1
        assert "pink" in result.output

    def test_check_missing_file(self, tmp_path):
        result = runner.invoke(app, ["config", "check", str(tmp_path / "absent.yaml")])
        assert result.exit_code == 1
        assert "CONFIGURATION" in result.output


class TestRootOptions:
    """Tests for global options."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "claims-timeline 0.1.0" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "parse" in result.output
