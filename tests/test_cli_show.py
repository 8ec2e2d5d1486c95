"""Tests for devscope show CLI command."""

from __future__ import annotations

import json
from datetime import timedelta
from pathlib import Path

from typer.testing import CliRunner

from devscope.cli.main import app
from devscope.devtools import DevTools
from devscope.logs.recorder import LogRecorder
from devscope.models.config import DevScopeConfig
from devscope.network.recorder import NetworkRecorder

runner = CliRunner()


def _network_export(tmp_path: Path) -> Path:
    recorder = NetworkRecorder()
    recorder.record_complete(
        "GET", "https://api.example.com/users", status_code=200,
        response_body={"users": []}, duration=timedelta(milliseconds=42),
    )
    recorder.record_complete("POST", "https://api.example.com/orders", status_code=500)
    recorder.begin_request("GET", "https://api.example.com/slow")
    path = tmp_path / "network.json"
    path.write_text(recorder.export_structured())
    return path


def _log_export(tmp_path: Path) -> Path:
    recorder = LogRecorder(echo=False)
    recorder.info("service started", tag="boot")
    recorder.log_error("payment declined", error="card expired", tag="billing")
    path = tmp_path / "logs.json"
    path.write_text(recorder.export_structured())
    return path


class TestShowNetwork:
    def test_renders_calls_and_counts(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(_network_export(tmp_path))])
        assert result.exit_code == 0, result.output
        assert "network" in result.output
        assert "/users" in result.output
        assert "PENDING" in result.output
        assert "500" in result.output

    def test_status_filter(self, tmp_path: Path):
        result = runner.invoke(
            app, ["show", str(_network_export(tmp_path)), "--status", "pending"]
        )
        assert result.exit_code == 0, result.output
        assert "/slow" in result.output
        assert "/orders" not in result.output

    def test_json_output(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(_network_export(tmp_path)), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [r["method"] for r in data["network"]] == ["GET", "POST", "GET"]
        assert data["network"][0]["duration"] == 42.0


class TestShowLogs:
    def test_renders_lines(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(_log_export(tmp_path))])
        assert result.exit_code == 0, result.output
        assert "service started" in result.output
        assert "card expired" in result.output
        assert "[billing]" in result.output

    def test_level_filter(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(_log_export(tmp_path)), "--level", "error"])
        assert result.exit_code == 0, result.output
        assert "payment declined" in result.output
        assert "service started" not in result.output

    def test_unknown_level(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(_log_export(tmp_path)), "--level", "loud"])
        assert result.exit_code == 1
        assert "Unknown log level" in result.output


class TestShowBundle:
    def test_bundle_renders_all_sections(self, tmp_path: Path):
        tools = DevTools(DevScopeConfig(echo_logs=False))
        tools.network.record_complete("GET", "https://x.test/a", status_code=204)
        tools.console.warning("low memory")
        path = tmp_path / "bundle.json"
        path.write_text(tools.export_all())

        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 0, result.output
        assert "low memory" in result.output
        assert "204" in result.output
        assert "FPS" in result.output

    def test_bundle_kind_selection(self, tmp_path: Path):
        tools = DevTools(DevScopeConfig(echo_logs=False))
        tools.console.warning("low memory")
        path = tmp_path / "bundle.json"
        path.write_text(tools.export_all())

        result = runner.invoke(app, ["show", str(path), "--kind", "performance"])
        assert result.exit_code == 0, result.output
        assert "low memory" not in result.output
        assert "FPS" in result.output


class TestShowErrors:
    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["show", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_undetectable_kind(self, tmp_path: Path):
        path = tmp_path / "empty.json"
        path.write_text("[]")
        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 1
        assert "--kind" in result.output

    def test_schema_mismatch(self, tmp_path: Path):
        path = tmp_path / "wrong.json"
        path.write_text(json.dumps([{"method": "GET"}]))
        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 1
        assert "does not match" in result.output


class TestVersionAndConfig:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "devscope 0.1.0" in result.output

    def test_config_defaults(self, tmp_path: Path):
        result = runner.invoke(app, ["config", "--project", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "built-in defaults" in result.output
        assert "max_network_records: 100" in result.output

    def test_config_from_file(self, tmp_path: Path):
        (tmp_path / "devscope.yaml").write_text("max_log_records: 42\n")
        result = runner.invoke(app, ["config", "--project", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "max_log_records: 42" in result.output

    def test_config_invalid(self, tmp_path: Path):
        (tmp_path / "devscope.yaml").write_text("bogus: 1\n")
        result = runner.invoke(app, ["config", "--project", str(tmp_path)])
        assert result.exit_code == 1
        assert "Invalid devscope.yaml" in result.output

    def test_config_explicit_file(self, tmp_path: Path):
        custom = tmp_path / "staging.yaml"
        custom.write_text("max_snapshots: 9\n")
        result = runner.invoke(app, ["config", "--project", str(custom)])
        assert result.exit_code == 0, result.output
        assert "max_snapshots: 9" in result.output
        assert "built-in defaults" not in result.output

    def test_config_found_in_parent(self, tmp_path: Path):
        (tmp_path / "devscope.yaml").write_text("echo_logs: false\n")
        child = tmp_path / "app"
        child.mkdir()
        result = runner.invoke(app, ["config", "--project", str(child)])
        assert result.exit_code == 0, result.output
        assert "echo_logs: false" in result.output
