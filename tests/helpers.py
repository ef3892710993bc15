"""Test doubles shared across test modules."""
from datetime import datetime, timedelta, timezone
from models.alerts import AlertRule
from models.telemetry import PerformanceLog, SystemMetric, ExecutionLog, ErrorLog, TelemetrySnapshot

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable clock; call it to read the time."""

    def __init__(self, start=T0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class MockRulesManager:
    """Minimal rules manager for testing."""

    def __init__(self, rules=None):
        self._rules = rules or []

    def get_enabled_rules(self):
        return [r for r in self._rules if r.enabled]

    def get_all_rules(self):
        return self._rules


class StaticTelemetry:
    """Telemetry provider returning rows stamped one minute before the clock."""

    def __init__(self, clock, durations=(), system=(), executions=0, errors=0):
        self.clock = clock
        self.durations = list(durations)
        self.system = list(system)
        self.executions = executions
        self.errors = errors
        self.fetches = 0

    def fetch_snapshot(self):
        self.fetches += 1
        now = self.clock()
        recent = now - timedelta(minutes=1)
        return TelemetrySnapshot(
            performance_logs=[PerformanceLog(timestamp=recent, duration=d) for d in self.durations],
            system_metrics=[SystemMetric(timestamp=recent, type=t, value=v) for t, v in self.system],
            execution_logs=[ExecutionLog(timestamp=recent) for _ in range(self.executions)],
            error_logs=[ErrorLog(timestamp=recent) for _ in range(self.errors)],
            fetched_at=now,
        )


def make_rule(**overrides):
    fields = dict(id="slow", name="Slow responses", metric="response_time",
                  condition="greater_than", threshold=1000, severity="high",
                  enabled=True, cooldown_minutes=5)
    fields.update(overrides)
    return AlertRule(**fields)
