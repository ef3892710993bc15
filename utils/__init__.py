"""Utility modules for AgentWatch."""
from utils.logger import setup_logging
from utils.formatters import format_metric_value, format_condition, format_severity, format_timestamp, time_ago
