"""Tests for alert notification channels."""
import json
from io import StringIO
from rich.console import Console
from models.alerts import Alert
from alerts.channels import AlertChannel, ConsoleChannel, FileChannel
from helpers import T0


def _alert(severity="high", message="Slow responses: response time has exceeded threshold of 1000 (current: 1500.00)"):
    return Alert(id="alert_1", rule_id="slow", rule_name="Slow responses", metric="response_time",
                 current_value=1500, threshold=1000, condition="greater_than",
                 severity=severity, message=message, timestamp=T0)


def test_channels_satisfy_protocol():
    assert isinstance(ConsoleChannel(), AlertChannel)
    assert isinstance(FileChannel(), AlertChannel)


def test_console_channel_prints_message():
    buf = StringIO()
    ConsoleChannel(Console(file=buf, width=200)).send(_alert())
    out = buf.getvalue()
    assert "[HIGH]" in out
    assert "exceeded threshold of 1000" in out


def test_console_channel_flags_critical():
    buf = StringIO()
    ConsoleChannel(Console(file=buf, width=200)).send(_alert(severity="critical", message="disk [full]"))
    out = buf.getvalue()
    assert "!!! [CRITICAL]" in out
    assert "disk [full]" in out


def test_file_channel_appends_json_lines(tmp_path):
    path = tmp_path / "logs" / "alerts.jsonl"
    channel = FileChannel(str(path))
    channel.send(_alert())
    channel.send(_alert(severity="low"))
    lines = path.read_text().strip().splitlines()
    assert len(lines) == 2
    entry = json.loads(lines[0])
    assert entry["ruleId"] == "slow"
    assert entry["currentValue"] == 1500
    assert entry["timestamp"] == T0.isoformat()
    assert entry["metadata"]["thresholdValue"] == 0.0
