"""Metric evaluation, condition checks and alert message formatting."""
import logging
from datetime import datetime, timedelta, timezone

logger = logging.getLogger("agentwatch.alerts.evaluator")

METRIC_WINDOW_MINUTES = 5
SESSION_DIVISOR = 10
EQUALS_TOLERANCE = 0.01

CONDITION_MAP = {
    "greater_than": lambda v, t: v > t,
    "less_than": lambda v, t: v < t,
    "equals": lambda v, t: abs(v - t) < EQUALS_TOLERANCE,
}

CONDITION_VERBS = {
    "greater_than": "exceeded",
    "less_than": "dropped below",
    "equals": "equals",
}


def _in_window(rows, cutoff):
    return [r for r in rows if r.timestamp > cutoff]


def _latest_system_metric(snapshot, metric_type, cutoff):
    rows = [m for m in _in_window(snapshot.system_metrics, cutoff) if m.type == metric_type]
    if not rows:
        return 0
    return max(rows, key=lambda m: m.timestamp).value


def calculate_metric_value(metric, snapshot, now=None, window_minutes=METRIC_WINDOW_MINUTES):
    """Compute the current value of a metric from a telemetry snapshot.

    Only rows newer than ``now - window_minutes`` count. Unknown metrics
    evaluate to 0 so a misconfigured rule never fires.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(minutes=window_minutes)

    if metric == "response_time":
        recent = _in_window(snapshot.performance_logs, cutoff)
        if not recent:
            return 0
        return sum(r.duration or 0 for r in recent) / len(recent)

    if metric == "error_rate":
        # Stub: always 0 until error counts are wired to a request total.
        return 0

    if metric in ("memory_usage", "cpu_usage"):
        return _latest_system_metric(snapshot, metric, cutoff)

    if metric == "log_volume":
        return len(_in_window(snapshot.execution_logs, cutoff))

    if metric == "active_sessions":
        activity = len(_in_window(snapshot.execution_logs, cutoff))
        if activity == 0:
            return 0
        return max(1, activity // SESSION_DIVISOR)

    logger.debug(f"Unknown metric '{metric}', evaluating as 0")
    return 0


def check_condition(condition, current_value, threshold):
    func = CONDITION_MAP.get(condition)
    if func is None:
        return False
    return func(current_value, threshold)


def _format_threshold(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_alert_message(rule, current_value):
    metric_name = rule.metric.replace("_", " ").lower()
    verb = CONDITION_VERBS.get(rule.condition, "met condition")
    return (f"{rule.name}: {metric_name} has {verb} threshold of {_format_threshold(rule.threshold)} "
            f"(current: {current_value:.2f})")
