"""Alert system module."""
from alerts.engine import AlertMonitor
from alerts.store import AlertStore
from alerts.cooldown import CooldownTracker
from alerts.rules_manager import RulesManager, RuleValidationError
from alerts.channels import ConsoleChannel, FileChannel
