"""Alert history filtering, analytics and JSON export."""
import json
from collections import Counter
from datetime import datetime, timedelta, timezone
from models.enums import SEVERITY_ORDER, Severity

DATE_RANGES = {
    "1h": timedelta(hours=1),
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def _now(now):
    return now or datetime.now(timezone.utc)


def filter_history(alerts, search=None, severity=None, status="all", date_range="all", now=None):
    """Filter alerts the way the history view does; newest first."""
    filtered = list(alerts)

    if search:
        needle = search.lower()
        filtered = [a for a in filtered
                    if needle in a.rule_name.lower() or needle in a.message.lower()]

    if severity and severity != "all":
        filtered = [a for a in filtered if a.severity == severity]

    if status == "resolved":
        filtered = [a for a in filtered if a.resolved]
    elif status == "active":
        filtered = [a for a in filtered if not a.resolved]
    elif status == "acknowledged":
        filtered = [a for a in filtered if a.acknowledged and not a.resolved]
    elif status != "all":
        raise ValueError(f"Unknown status filter: {status}")

    if date_range != "all":
        if date_range not in DATE_RANGES:
            raise ValueError(f"Unknown date range: {date_range}")
        cutoff = _now(now) - DATE_RANGES[date_range]
        filtered = [a for a in filtered if a.timestamp >= cutoff]

    return sorted(filtered, key=lambda a: a.timestamp, reverse=True)


def sort_by_priority(alerts):
    """Most severe first; newest first within a severity."""
    by_time = sorted(alerts, key=lambda a: a.timestamp, reverse=True)
    return sorted(by_time, key=lambda a: SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)))


def compute_analytics(alerts, days=7, now=None):
    now = _now(now)
    alerts = list(alerts)
    severity_distribution = dict(Counter(a.severity for a in alerts))

    trend = []
    today = now.date()
    for i in range(days - 1, -1, -1):
        day = today - timedelta(days=i)
        day_alerts = [a for a in alerts if a.timestamp.astimezone(now.tzinfo).date() == day]
        entry = {"date": day.isoformat(), "total": len(day_alerts)}
        for sev in Severity:
            entry[sev.value] = sum(1 for a in day_alerts if a.severity == sev.value)
        entry["resolved"] = sum(1 for a in day_alerts if a.resolved)
        trend.append(entry)

    resolved = [a for a in alerts if a.resolved and a.resolved_at]
    avg_resolution_minutes = 0.0
    if resolved:
        total_seconds = sum((a.resolved_at - a.timestamp).total_seconds() for a in resolved)
        avg_resolution_minutes = total_seconds / len(resolved) / 60

    resolved_count = sum(1 for a in alerts if a.resolved)
    return {
        "totalAlerts": len(alerts),
        "resolvedAlerts": resolved_count,
        "criticalAlerts": sum(1 for a in alerts if a.severity == Severity.CRITICAL.value),
        "severityDistribution": severity_distribution,
        "trend": trend,
        "avgResolutionMinutes": round(avg_resolution_minutes, 2),
        "resolutionRate": round(resolved_count / len(alerts) * 100, 2) if alerts else 0.0,
    }


def build_export(alerts, filters=None, now=None):
    """Assemble a history report for download."""
    filters = filters or {}
    now = _now(now)
    filtered = filter_history(alerts, now=now, **filters)
    return {
        "exportTime": now.isoformat(),
        "filters": {"search": None, "severity": None, "status": "all", "date_range": "all", **filters},
        "alerts": [a.to_dict() for a in filtered],
        "analytics": compute_analytics(alerts, now=now),
    }


def export_json(alerts, filters=None, now=None, indent=2):
    return json.dumps(build_export(alerts, filters, now), indent=indent)


def default_export_filename(now=None):
    return f"alert-report-{_now(now).strftime('%Y-%m-%d-%H-%M')}.json"
