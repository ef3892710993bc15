"""Tests for display formatting utilities."""
from datetime import timedelta
from utils.formatters import format_condition, format_metric_value, format_severity, format_timestamp, time_ago
from helpers import T0


def test_format_metric_value_units():
    assert format_metric_value("response_time", 1500) == "1,500.00 ms"
    assert format_metric_value("cpu_usage", 93.456) == "93.5%"
    assert format_metric_value("log_volume", 42) == "42 logs"
    assert format_metric_value("active_sessions", 3.0) == "3 sessions"
    assert format_metric_value("mystery", 1.5) == "1.50"
    assert format_metric_value("cpu_usage", None) == "N/A"


def test_format_condition():
    assert format_condition("greater_than", 1000.0) == "> 1000"
    assert format_condition("less_than", 2.5) == "< 2.5"
    assert format_condition("equals", 50) == "= 50"
    assert format_condition("between", 3) == "between 3"


def test_format_severity():
    assert format_severity("critical", with_color=False) == "CRITICAL"
    assert format_severity("high") == "[dark_orange]HIGH[/dark_orange]"


def test_format_timestamp():
    assert format_timestamp(T0) == "2026-03-01 12:00:00 UTC"
    assert format_timestamp(None) == "N/A"


def test_time_ago():
    assert time_ago(T0 - timedelta(seconds=30), now=T0) == "30s ago"
    assert time_ago(T0 - timedelta(minutes=5), now=T0) == "5m ago"
    assert time_ago(T0 - timedelta(hours=3), now=T0) == "3h ago"
    assert time_ago(T0 - timedelta(days=2), now=T0) == "2d ago"
    assert time_ago(None) == "N/A"
