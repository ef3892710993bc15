"""Dataclasses for alert rules and alert records."""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Optional


def _iso(value):
    if value is None:
        return None
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


@dataclass
class AlertRule:
    id: str = ""
    name: str = ""
    metric: str = ""
    condition: str = "greater_than"
    threshold: float = 0.0
    severity: str = "medium"
    enabled: bool = True
    cooldown_minutes: int = 5
    description: str = ""

    def to_dict(self):
        return asdict(self)


@dataclass
class AlertMetadata:
    """Audit snapshot taken when the rule fired."""
    check_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metric_value: float = 0.0
    threshold_value: float = 0.0

    def to_dict(self):
        return {
            "checkTime": _iso(self.check_time),
            "metricValue": self.metric_value,
            "thresholdValue": self.threshold_value,
        }


@dataclass
class Alert:
    id: str = ""
    rule_id: str = ""
    rule_name: str = ""
    metric: str = ""
    current_value: float = 0.0
    threshold: float = 0.0
    condition: str = ""
    severity: str = "medium"
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    acknowledged: bool = False
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    metadata: AlertMetadata = field(default_factory=AlertMetadata)

    def to_dict(self):
        """Serialize with the camelCase keys the dashboard consumes."""
        return {
            "id": self.id,
            "ruleId": self.rule_id,
            "ruleName": self.rule_name,
            "metric": self.metric,
            "currentValue": self.current_value,
            "threshold": self.threshold,
            "condition": self.condition,
            "severity": self.severity,
            "message": self.message,
            "timestamp": _iso(self.timestamp),
            "acknowledged": self.acknowledged,
            "resolved": self.resolved,
            "resolvedAt": _iso(self.resolved_at),
            "resolvedBy": self.resolved_by,
            "metadata": self.metadata.to_dict(),
        }
