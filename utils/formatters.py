"""Formatting utilities for display."""
from datetime import datetime, timezone

METRIC_UNITS = {
    "response_time": "ms",
    "error_rate": "%",
    "memory_usage": "%",
    "cpu_usage": "%",
    "log_volume": "logs",
    "active_sessions": "sessions",
}

CONDITION_SYMBOLS = {
    "greater_than": ">",
    "less_than": "<",
    "equals": "=",
}

SEVERITY_COLORS = {
    "critical": "red",
    "high": "dark_orange",
    "medium": "yellow",
    "low": "blue",
}


def format_metric_value(metric, value):
    """Format a metric value with its unit: 1500 → '1,500.00 ms'."""
    if value is None:
        return "N/A"
    unit = METRIC_UNITS.get(metric, "")
    value = float(value)
    if unit in ("logs", "sessions"):
        return f"{int(value):,} {unit}"
    if unit == "%":
        return f"{value:.1f}%"
    return f"{value:,.2f} {unit}".strip()


def format_condition(condition, threshold):
    """Render a rule condition: ('greater_than', 1000) → '> 1000'."""
    symbol = CONDITION_SYMBOLS.get(condition, condition)
    if isinstance(threshold, float) and threshold.is_integer():
        threshold = int(threshold)
    return f"{symbol} {threshold}"


def format_severity(severity, with_color=True):
    label = str(severity).upper()
    if not with_color:
        return label
    color = SEVERITY_COLORS.get(str(severity), "white")
    return f"[{color}]{label}[/{color}]"


def format_timestamp(ts):
    """Format a datetime to human-readable string."""
    if ts is None:
        return "N/A"
    if isinstance(ts, str):
        return ts
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def time_ago(dt, now=None):
    """Return human-readable time since dt. E.g., '3m ago', '2d ago'."""
    if dt is None:
        return "N/A"
    now = now or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = now - dt
    seconds = max(0, int(delta.total_seconds()))

    if seconds < 60:
        return f"{seconds}s ago"
    elif seconds < 3600:
        return f"{seconds // 60}m ago"
    elif seconds < 86400:
        return f"{seconds // 3600}h ago"
    else:
        return f"{seconds // 86400}d ago"
