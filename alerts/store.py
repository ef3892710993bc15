"""In-memory alert state: active alerts, history and the monitoring flag.

The store is an ordinary object owned by whoever builds the monitor, so several
monitors (and every test) get independent state. All access goes through an
RLock because the scheduler thread and operator actions share it.
"""
import logging
import threading
from datetime import datetime, timezone

logger = logging.getLogger("agentwatch.alerts.store")


class AlertStore:
    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.RLock()
        self._active = []
        self._history = []
        self.is_monitoring = False
        self.last_check_time = None

    # --- Reads ---

    @property
    def active_alerts(self):
        with self._lock:
            return list(self._active)

    @property
    def alert_history(self):
        with self._lock:
            return list(self._history)

    @property
    def critical_alerts(self):
        return [a for a in self.active_alerts if a.severity == "critical"]

    @property
    def high_alerts(self):
        return [a for a in self.active_alerts if a.severity == "high"]

    @property
    def unacknowledged_alerts(self):
        return [a for a in self.active_alerts if not a.acknowledged]

    @property
    def total_active_alerts(self):
        with self._lock:
            return len(self._active)

    def get_alert(self, alert_id):
        with self._lock:
            for alert in self._history:
                if alert.id == alert_id:
                    return alert
        return None

    # --- Mutations ---

    def append(self, new_alerts, check_time=None):
        with self._lock:
            self._active.extend(new_alerts)
            self._history.extend(new_alerts)
            self.last_check_time = check_time or self._clock()

    def mark_checked(self, check_time=None):
        with self._lock:
            self.last_check_time = check_time or self._clock()

    def acknowledge(self, alert_id):
        """Mark an alert acknowledged. Returns False for an unknown id."""
        with self._lock:
            found = False
            for alert in self._active + self._history:
                if alert.id == alert_id:
                    alert.acknowledged = True
                    found = True
        if found:
            logger.info(f"Alert {alert_id} acknowledged")
        return found

    def resolve(self, alert_id, resolved_by=None):
        """Resolve an alert and drop it from the active set. Returns False for an unknown id."""
        with self._lock:
            target = None
            for alert in self._history:
                if alert.id == alert_id:
                    target = alert
                    break
            if target is None:
                return False
            self._active = [a for a in self._active if a.id != alert_id]
            target.resolved = True
            target.resolved_at = self._clock()
            if resolved_by is not None:
                target.resolved_by = resolved_by
        logger.info(f"Alert {alert_id} resolved" + (f" by {resolved_by}" if resolved_by else ""))
        return True

    def clear_all(self):
        """Resolve every alert. Existing resolution times are kept."""
        with self._lock:
            now = self._clock()
            count = len(self._active)
            self._active = []
            for alert in self._history:
                if not alert.resolved:
                    alert.resolved = True
                if alert.resolved_at is None:
                    alert.resolved_at = now
        logger.info(f"Cleared {count} active alert(s)")
        return count

    def set_monitoring(self, enabled):
        with self._lock:
            self.is_monitoring = bool(enabled)

    def snapshot(self):
        """JSON-ready view of the whole store."""
        with self._lock:
            active = [a.to_dict() for a in self._active]
            history = [a.to_dict() for a in self._history]
            return {
                "activeAlerts": active,
                "alertHistory": history,
                "isMonitoring": self.is_monitoring,
                "lastCheckTime": self.last_check_time.isoformat() if self.last_check_time else None,
                "criticalAlerts": sum(1 for a in self._active if a.severity == "critical"),
                "highAlerts": sum(1 for a in self._active if a.severity == "high"),
                "unacknowledgedAlerts": sum(1 for a in self._active if not a.acknowledged),
                "totalActiveAlerts": len(self._active),
            }
