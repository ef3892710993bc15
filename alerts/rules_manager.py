"""Alert rules loading and management."""
import logging
import time
import uuid
import yaml
from dataclasses import fields, replace
from pathlib import Path
from models.alerts import AlertRule
from models.enums import Condition, MetricName, Severity

logger = logging.getLogger("agentwatch.alerts.rules")

VALID_CONDITIONS = {c.value for c in Condition}
VALID_METRICS = {m.value for m in MetricName}
VALID_SEVERITIES = {s.value for s in Severity}
_RULE_FIELDS = {f.name for f in fields(AlertRule)}


class RuleValidationError(ValueError):
    pass


def _generate_rule_id():
    return f"rule_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


def validate_rule(rule):
    """Raise RuleValidationError if a rule cannot be monitored at all."""
    if not rule.name:
        raise RuleValidationError("Rule name is required")
    if not rule.metric:
        raise RuleValidationError(f"Rule '{rule.name}' has no metric")
    if rule.severity not in VALID_SEVERITIES:
        raise RuleValidationError(f"Rule '{rule.name}' has invalid severity: {rule.severity}")
    if rule.cooldown_minutes < 0:
        raise RuleValidationError(f"Rule '{rule.name}' has negative cooldown")
    # Unknown metrics/conditions are allowed; they evaluate to 0 / never fire.
    if rule.metric not in VALID_METRICS:
        logger.warning(f"Rule '{rule.name}' uses unknown metric '{rule.metric}'; it will evaluate as 0")
    if rule.condition not in VALID_CONDITIONS:
        logger.warning(f"Rule '{rule.name}' uses unknown condition '{rule.condition}'; it will never fire")


def rule_from_dict(r):
    return AlertRule(
        id=str(r.get("id") or _generate_rule_id()),
        name=r.get("name", ""),
        metric=r.get("metric", ""),
        condition=r.get("condition", "greater_than"),
        threshold=float(r.get("threshold", 0)),
        severity=r.get("severity", "medium"),
        enabled=bool(r.get("enabled", True)),
        cooldown_minutes=int(r.get("cooldown_minutes", r.get("cooldownMinutes", 5))),
        description=r.get("description", ""),
    )


class RulesManager:
    def __init__(self, rules_path="config/alerts_rules.yaml", autoload=True):
        self.rules_path = Path(rules_path) if rules_path else None
        self.rules = []
        if autoload:
            self.load()

    def load(self):
        if self.rules_path is None or not self.rules_path.exists():
            logger.warning(f"Alert rules file not found: {self.rules_path}")
            return
        with open(self.rules_path) as f:
            data = yaml.safe_load(f) or {}
        self.rules = self._parse_rules(data.get("rules", []))
        logger.info(f"Loaded {len(self.rules)} alert rules")

    def save(self, path=None):
        target = Path(path) if path else self.rules_path
        if target is None:
            raise ValueError("No rules path configured")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w") as f:
            yaml.safe_dump({"rules": [r.to_dict() for r in self.rules]}, f, sort_keys=False)
        logger.info(f"Saved {len(self.rules)} alert rules to {target}")

    def _parse_rules(self, raw_rules):
        rules = []
        seen = set()
        for r in raw_rules:
            try:
                rule = rule_from_dict(r)
                validate_rule(rule)
            except (RuleValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid rule {r.get('id')}: {e}")
                continue
            if rule.id in seen:
                logger.warning(f"Duplicate rule id {rule.id}, keeping the first")
                continue
            seen.add(rule.id)
            rules.append(rule)
        return rules

    def get_enabled_rules(self):
        return [r for r in self.rules if r.enabled]

    def get_rule(self, rule_id):
        for r in self.rules:
            if r.id == rule_id:
                return r
        return None

    def get_all_rules(self):
        return self.rules

    def add_rule(self, rule):
        if isinstance(rule, dict):
            rule = rule_from_dict(rule)
        if not rule.id:
            rule.id = _generate_rule_id()
        validate_rule(rule)
        if self.get_rule(rule.id):
            raise RuleValidationError(f"Rule id already exists: {rule.id}")
        self.rules.append(rule)
        logger.info(f"Alert rule created: {rule.name}")
        return rule

    def update_rule(self, rule_id, **changes):
        """Apply partial changes to a rule. Returns the updated rule or None."""
        for i, r in enumerate(self.rules):
            if r.id != rule_id:
                continue
            unknown = set(changes) - _RULE_FIELDS
            if unknown:
                raise RuleValidationError(f"Unknown rule fields: {sorted(unknown)}")
            changes.pop("id", None)
            updated = replace(r, **changes)
            validate_rule(updated)
            self.rules[i] = updated
            logger.info(f"Alert rule updated: {updated.name}")
            return updated
        return None

    def delete_rule(self, rule_id):
        before = len(self.rules)
        self.rules = [r for r in self.rules if r.id != rule_id]
        deleted = len(self.rules) < before
        if deleted:
            logger.info(f"Alert rule deleted: {rule_id}")
        return deleted

    def toggle_rule(self, rule_id, enabled):
        updated = self.update_rule(rule_id, enabled=bool(enabled))
        if updated:
            logger.info(f"Alert rule {'enabled' if enabled else 'disabled'}: {updated.name}")
        return updated
