"""Data models."""
from models.enums import MetricName, Condition, Severity, AlertStatusFilter
from models.alerts import AlertRule, Alert, AlertMetadata
from models.telemetry import PerformanceLog, SystemMetric, ExecutionLog, ErrorLog, TelemetrySnapshot
