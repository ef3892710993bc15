"""Tests for the telemetry database and accessors."""
import json
import pytest
from datetime import datetime, timedelta, timezone
from models.database import parse_timestamp
from monitor.telemetry import TelemetryProvider


def test_table_creation(temp_db):
    tables = temp_db.conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    ).fetchall()
    names = {t["name"] for t in tables}
    assert {"performance_logs", "system_metrics", "execution_logs", "error_logs"} <= names


def test_empty_db_returns_nothing(temp_db):
    assert temp_db.get_recent_performance_logs() == []
    assert temp_db.get_recent_system_metrics() == []
    assert temp_db.get_recent_execution_logs() == []
    assert temp_db.get_recent_error_logs() == []


def test_performance_logs_newest_first_with_limit(temp_db):
    now = datetime.now(timezone.utc)
    for i in range(5):
        temp_db.record_performance(100 * i, timestamp=now - timedelta(minutes=i))
    rows = temp_db.get_recent_performance_logs(limit=3)
    assert [r.duration for r in rows] == [0, 100, 200]
    assert rows[0].timestamp.tzinfo is not None


def test_system_metrics_limited_to_recent_hours(temp_db):
    now = datetime.now(timezone.utc)
    temp_db.record_system_metric("cpu_usage", 55, timestamp=now - timedelta(minutes=10))
    temp_db.record_system_metric("cpu_usage", 99, timestamp=now - timedelta(hours=3))
    rows = temp_db.get_recent_system_metrics(hours=1)
    assert [(r.type, r.value) for r in rows] == [("cpu_usage", 55)]


def test_naive_timestamps_treated_as_utc(temp_db):
    temp_db.record_execution("hello", timestamp="2026-03-01T12:00:00")
    row = temp_db.get_recent_execution_logs()[0]
    assert row.timestamp == datetime(2026, 3, 1, 12, tzinfo=timezone.utc)


def test_parse_timestamp_z_suffix():
    assert parse_timestamp("2026-03-01T12:00:00Z") == datetime(2026, 3, 1, 12, tzinfo=timezone.utc)


def test_fetch_snapshot(temp_db):
    temp_db.record_performance(1200)
    temp_db.record_system_metric("memory_usage", 70)
    temp_db.record_execution("step")
    temp_db.record_error("boom", severity="critical")

    snap = TelemetryProvider(temp_db).fetch_snapshot()
    assert snap.performance_logs[0].duration == 1200
    assert snap.system_metrics[0].type == "memory_usage"
    assert len(snap.execution_logs) == 1
    assert snap.error_logs[0].severity == "critical"


def test_provider_limits_from_config(temp_db):
    for _ in range(5):
        temp_db.record_execution("x")
    provider = TelemetryProvider(temp_db, {"telemetry": {"execution_limit": 2}})
    assert len(provider.get_recent_execution_logs()) == 2


def test_record_unknown_kind(temp_db):
    with pytest.raises(ValueError):
        TelemetryProvider(temp_db).record("traces", value=1)


def test_ingest_jsonl(temp_db, tmp_path):
    path = tmp_path / "telemetry.jsonl"
    lines = [
        {"kind": "performance", "duration": 1500, "operation": "codegen"},
        {"kind": "system", "type": "cpu_usage", "value": 93},
        {"kind": "execution", "message": "task started"},
        {"kind": "error", "message": "model timeout", "severity": "high"},
        {"kind": "bogus"},
        {"duration": 5},
    ]
    path.write_text("\n".join(json.dumps(l) for l in lines) + "\nnot json\n\n")

    added, skipped = TelemetryProvider(temp_db).ingest_jsonl(path)
    assert (added, skipped) == (4, 3)
    counts = temp_db.get_table_counts()
    assert counts == {"performance_logs": 1, "system_metrics": 1, "execution_logs": 1, "error_logs": 1}


def test_end_to_end_with_monitor(temp_db):
    from alerts.engine import AlertMonitor
    from helpers import MockRulesManager, make_rule

    temp_db.record_performance(1400)
    temp_db.record_performance(1600)
    monitor = AlertMonitor(MockRulesManager([make_rule()]), TelemetryProvider(temp_db))
    monitor.store.set_monitoring(True)
    created = monitor.check_alert_rules()
    assert len(created) == 1
    assert created[0].current_value == 1500


def test_execution_logs_filtered_by_since(temp_db):
    now = datetime.now(timezone.utc)
    temp_db.record_execution("recent", timestamp=now - timedelta(minutes=1))
    temp_db.record_execution("stale", timestamp=now - timedelta(minutes=30))
    rows = temp_db.get_recent_execution_logs(limit=None, since=now - timedelta(minutes=5))
    assert [r.message for r in rows] == ["recent"]


def test_provider_reads_whole_window_of_execution_logs(temp_db, clock):
    from alerts.evaluator import calculate_metric_value

    for i in range(600):
        temp_db.record_execution(f"step {i}", timestamp=clock.now - timedelta(seconds=30))
    temp_db.record_execution("old", timestamp=clock.now - timedelta(minutes=10))
    provider = TelemetryProvider(temp_db, {"monitoring": {"metric_window_minutes": 5}}, clock=clock)

    snap = provider.fetch_snapshot()
    assert len(snap.execution_logs) == 600
    assert calculate_metric_value("log_volume", snap, now=clock.now) == 600
    assert calculate_metric_value("active_sessions", snap, now=clock.now) == 60


def test_log_flood_rule_fires_with_more_than_100_rows(temp_db, clock):
    from alerts.engine import AlertMonitor
    from helpers import MockRulesManager, make_rule

    for _ in range(600):
        temp_db.record_execution("tick", timestamp=clock.now - timedelta(minutes=1))
    rule = make_rule(id="log_flood", name="Log flood", metric="log_volume",
                     threshold=500, severity="medium")
    monitor = AlertMonitor(MockRulesManager([rule]), TelemetryProvider(temp_db, clock=clock),
                           clock=clock)
    monitor.store.set_monitoring(True)

    created = monitor.check_alert_rules()
    assert len(created) == 1
    assert created[0].current_value == 600


def test_record_system_metric_requires_type(temp_db):
    with pytest.raises(ValueError, match="System metric type is required"):
        TelemetryProvider(temp_db).record("system", value=50)
    assert temp_db.get_table_counts()["system_metrics"] == 0


def test_ingest_skips_system_row_without_type(temp_db, tmp_path):
    path = tmp_path / "mixed.jsonl"
    lines = [
        {"kind": "performance", "duration": 900},
        {"kind": "system", "value": 42},
        {"kind": "performance", "duration": 1100},
    ]
    path.write_text("\n".join(json.dumps(l) for l in lines) + "\n")

    added, skipped = TelemetryProvider(temp_db).ingest_jsonl(path)
    assert (added, skipped) == (2, 1)
    counts = temp_db.get_table_counts()
    assert counts["performance_logs"] == 2
    assert counts["system_metrics"] == 0
