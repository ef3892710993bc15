"""Tests for CLI commands."""
import json
import pytest
import yaml
from datetime import datetime, timezone

from click.testing import CliRunner
from rich.console import Console

import main
from main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    monkeypatch.setattr(main, "console", Console(width=200))


@pytest.fixture
def config_file(tmp_path, rules_yaml):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "database": {"path": str(tmp_path / "aw.db")},
        "alerts": {"rules_path": str(rules_yaml), "log_path": str(tmp_path / "alerts.jsonl")},
    }))
    return path


def _invoke(runner, config_file, *args):
    return runner.invoke(cli, ["--config", str(config_file), *args], obj={})


def test_cli_help(runner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "AgentWatch" in result.output


def test_cli_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output


def test_alerts_help(runner):
    result = runner.invoke(cli, ["alerts", "--help"])
    assert result.exit_code == 0
    assert "check" in result.output
    assert "test" in result.output
    assert "rules" in result.output


def test_setup(runner, config_file):
    result = _invoke(runner, config_file, "setup")
    assert result.exit_code == 0
    assert "3 alert rules loaded (2 enabled)" in result.output


def test_alerts_rules_lists_rules(runner, config_file):
    result = _invoke(runner, config_file, "alerts", "rules")
    assert result.exit_code == 0
    assert "Slow responses" in result.output
    assert "Memory pressure" in result.output


def test_check_all_clear(runner, config_file):
    result = _invoke(runner, config_file, "alerts", "check")
    assert result.exit_code == 0
    assert "All clear" in result.output


def test_ingest_then_check_fires(runner, config_file, tmp_path):
    now = datetime.now(timezone.utc).isoformat()
    rows = tmp_path / "rows.jsonl"
    rows.write_text("\n".join(json.dumps(r) for r in [
        {"kind": "performance", "duration": 1400, "timestamp": now},
        {"kind": "performance", "duration": 1600, "timestamp": now},
    ]))
    result = _invoke(runner, config_file, "telemetry", "ingest", str(rows))
    assert result.exit_code == 0
    assert "Ingested 2 rows" in result.output

    result = _invoke(runner, config_file, "alerts", "check")
    assert result.exit_code == 0
    assert "1 alert(s) triggered" in result.output
    assert "exceeded threshold of 1000" in result.output
    assert (tmp_path / "alerts.jsonl").exists()


def test_record_and_status(runner, config_file):
    result = _invoke(runner, config_file, "telemetry", "record", "system", "--type", "cpu_usage", "--value", "97")
    assert result.exit_code == 0
    result = _invoke(runner, config_file, "telemetry", "status")
    assert result.exit_code == 0
    assert "system_metrics" in result.output


def test_record_system_requires_type(runner, config_file):
    result = _invoke(runner, config_file, "telemetry", "record", "system", "--value", "97")
    assert result.exit_code == 1


def test_alerts_test_table(runner, config_file):
    result = _invoke(runner, config_file, "alerts", "test")
    assert result.exit_code == 0
    assert "Alert Rules Test" in result.output


def test_rules_add_toggle_delete(runner, config_file, rules_yaml):
    result = _invoke(runner, config_file, "rules", "add", "--name", "CPU", "--metric", "cpu_usage",
                     "--threshold", "90", "--severity", "high")
    assert result.exit_code == 0
    saved = yaml.safe_load(rules_yaml.read_text())["rules"]
    new_id = saved[-1]["id"]
    assert saved[-1]["name"] == "CPU"

    result = _invoke(runner, config_file, "rules", "toggle", new_id, "--off")
    assert result.exit_code == 0
    assert yaml.safe_load(rules_yaml.read_text())["rules"][-1]["enabled"] is False

    result = _invoke(runner, config_file, "rules", "delete", new_id)
    assert result.exit_code == 0
    assert len(yaml.safe_load(rules_yaml.read_text())["rules"]) == 3


def test_rules_delete_unknown(runner, config_file):
    result = _invoke(runner, config_file, "rules", "delete", "missing")
    assert result.exit_code == 1
    assert "No rule" in result.output
