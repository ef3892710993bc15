"""Alert monitoring engine: evaluate rules against telemetry and materialize alerts."""
import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from models.alerts import Alert, AlertMetadata
from alerts.cooldown import CooldownTracker
from alerts.evaluator import (
    METRIC_WINDOW_MINUTES, calculate_metric_value, check_condition, format_alert_message,
)
from alerts.store import AlertStore

logger = logging.getLogger("agentwatch.alerts.engine")


def _generate_alert_id(now):
    return f"alert_{int(now.timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


class AlertMonitor:
    def __init__(self, rules_manager, telemetry, store=None, cooldowns=None, channels=None,
                 check_interval_seconds=30, enabled=True, window_minutes=METRIC_WINDOW_MINUTES,
                 clock=None):
        self.rules_manager = rules_manager
        self.telemetry = telemetry
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.store = store or AlertStore(clock=self.clock)
        self.cooldowns = cooldowns or CooldownTracker(clock=self.clock)
        self.channels = channels or []
        self.check_interval_seconds = check_interval_seconds
        self.enabled = enabled
        self.window_minutes = window_minutes
        self.last_error = None
        self.scheduler = None
        self._stopped_by_user = False
        self._pass_lock = threading.Lock()

    # --- State passthrough ---

    @property
    def is_monitoring(self):
        return self.store.is_monitoring

    @property
    def last_check_time(self):
        return self.store.last_check_time

    # --- Evaluation ---

    def _create_alert(self, rule, current_value, now):
        alert = Alert(
            id=_generate_alert_id(now),
            rule_id=rule.id,
            rule_name=rule.name,
            metric=rule.metric,
            current_value=current_value,
            threshold=rule.threshold,
            condition=rule.condition,
            severity=rule.severity,
            message=format_alert_message(rule, current_value),
            timestamp=now,
            metadata=AlertMetadata(
                check_time=now,
                metric_value=current_value,
                threshold_value=rule.threshold,
            ),
        )
        self.cooldowns.record(rule.id, now)
        return alert

    def _evaluate_rule(self, rule, snapshot, now):
        current_value = calculate_metric_value(rule.metric, snapshot, now=now,
                                               window_minutes=self.window_minutes)
        if not check_condition(rule.condition, current_value, rule.threshold):
            return None
        return self._create_alert(rule, current_value, now)

    def check_alert_rules(self):
        """Run one evaluation pass. Returns the alerts created by this pass."""
        rules = self.rules_manager.get_all_rules()
        if not self.enabled or not self.store.is_monitoring or not rules:
            return []

        if not self._pass_lock.acquire(blocking=False):
            logger.debug("Previous evaluation pass still running, skipping this tick")
            return []

        try:
            self.last_error = None
            now = self.clock()
            try:
                snapshot = self.telemetry.fetch_snapshot()
            except Exception as e:
                self.last_error = str(e) or e.__class__.__name__
                logger.error(f"Alert monitoring error: telemetry fetch failed: {e}")
                return []

            new_alerts = []
            for rule in rules:
                if not rule.enabled:
                    continue
                if self.cooldowns.is_in_cooldown(rule.id, rule.cooldown_minutes):
                    logger.debug(f"Rule {rule.id} in cooldown, skipping")
                    continue
                try:
                    alert = self._evaluate_rule(rule, snapshot, now)
                except Exception as e:
                    self.last_error = f"Rule {rule.id}: {e}"
                    logger.warning(f"Rule {rule.id} evaluation failed: {e}")
                    continue
                if alert is not None:
                    new_alerts.append(alert)

            if new_alerts:
                self.store.append(new_alerts, check_time=now)
                for alert in new_alerts:
                    logger.info(f"Alert fired [{alert.severity}] {alert.message}")
                    self._dispatch(alert)
            else:
                self.store.mark_checked(now)
            return new_alerts
        finally:
            self._pass_lock.release()

    def test_rules(self):
        """Evaluate ALL rules ignoring cooldowns and enabled flags, without creating alerts."""
        snapshot = self.telemetry.fetch_snapshot()
        now = self.clock()
        results = []
        for rule in self.rules_manager.get_all_rules():
            value = calculate_metric_value(rule.metric, snapshot, now=now,
                                           window_minutes=self.window_minutes)
            results.append({
                "rule_id": rule.id,
                "name": rule.name,
                "metric": rule.metric,
                "condition": rule.condition,
                "threshold": rule.threshold,
                "current_value": value,
                "would_fire": check_condition(rule.condition, value, rule.threshold),
                "in_cooldown": self.cooldowns.is_in_cooldown(rule.id, rule.cooldown_minutes),
                "severity": rule.severity,
                "enabled": rule.enabled,
            })
        return results

    # --- Operator actions ---

    def acknowledge_alert(self, alert_id):
        return self.store.acknowledge(alert_id)

    def resolve_alert(self, alert_id, resolved_by=None):
        return self.store.resolve(alert_id, resolved_by)

    def clear_all_alerts(self):
        return self.store.clear_all()

    # --- Lifecycle ---

    def attach_scheduler(self, scheduler):
        self.scheduler = scheduler

    def start_monitoring(self):
        """Enable monitoring and run one pass immediately (or via the scheduler)."""
        self._stopped_by_user = False
        self.store.set_monitoring(True)
        logger.info("Alert monitoring started")
        if self.scheduler is not None:
            self.scheduler.start()
        else:
            self.check_alert_rules()

    def stop_monitoring(self):
        self._stopped_by_user = True
        self.store.set_monitoring(False)
        if self.scheduler is not None:
            self.scheduler.stop()
        logger.info("Alert monitoring stopped")

    def auto_start(self):
        """Start monitoring once rules are available, unless an operator stopped it."""
        if (self.enabled and self.rules_manager.get_all_rules()
                and not self.store.is_monitoring and not self._stopped_by_user):
            self.start_monitoring()
            return True
        return False

    def status(self):
        return {
            "isMonitoring": self.store.is_monitoring,
            "enabled": self.enabled,
            "lastCheckTime": self.last_check_time.isoformat() if self.last_check_time else None,
            "lastError": self.last_error,
            "checkIntervalSeconds": self.check_interval_seconds,
            "rules": len(self.rules_manager.get_all_rules()),
            "enabledRules": len(self.rules_manager.get_enabled_rules()),
            "totalActiveAlerts": self.store.total_active_alerts,
        }

    def _dispatch(self, alert):
        for channel in self.channels:
            try:
                channel.send(alert)
            except Exception as e:
                logger.warning(f"Channel dispatch error: {e}")


def run_forever(monitor, poll_seconds=1):
    """Block until monitoring is stopped or interrupted."""
    try:
        while monitor.is_monitoring:
            time.sleep(poll_seconds)
    except KeyboardInterrupt:
        monitor.stop_monitoring()
