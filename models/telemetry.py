"""Dataclasses for telemetry rows consumed by the metric evaluator."""
from dataclasses import dataclass, field
from datetime import datetime, timezone


def _now():
    return datetime.now(timezone.utc)


@dataclass
class PerformanceLog:
    timestamp: datetime = field(default_factory=_now)
    duration: float = 0.0
    operation: str = ""


@dataclass
class SystemMetric:
    timestamp: datetime = field(default_factory=_now)
    type: str = ""
    value: float = 0.0


@dataclass
class ExecutionLog:
    timestamp: datetime = field(default_factory=_now)
    level: str = "info"
    message: str = ""


@dataclass
class ErrorLog:
    timestamp: datetime = field(default_factory=_now)
    severity: str = "error"
    message: str = ""


@dataclass
class TelemetrySnapshot:
    """Rows fetched once per evaluation pass."""
    performance_logs: list = field(default_factory=list)
    system_metrics: list = field(default_factory=list)
    execution_logs: list = field(default_factory=list)
    error_logs: list = field(default_factory=list)
    fetched_at: datetime = field(default_factory=_now)
