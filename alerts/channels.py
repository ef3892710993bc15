"""Alert notification channels."""
import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger("agentwatch.alerts.channels")


@runtime_checkable
class AlertChannel(Protocol):
    def send(self, alert) -> None: ...


class ConsoleChannel:
    """Print alerts to terminal with rich formatting."""

    severity_styles = {
        "critical": "bold white on red",
        "high": "bold red",
        "medium": "bold yellow",
        "low": "bold blue",
    }

    def __init__(self, console=None):
        self.console = console

    def send(self, alert):
        from rich.console import Console
        from rich.markup import escape
        console = self.console or Console()
        sev = alert.severity.value if hasattr(alert.severity, "value") else str(alert.severity)
        style = self.severity_styles.get(sev, "bold")
        prefix = "!!! " if sev == "critical" else ""
        console.print(f"[{style}]{escape(f'{prefix}[{sev.upper()}]')}[/] {escape(alert.message)}", highlight=False)
        if sev == "critical":
            console.bell()


class FileChannel:
    """Append alerts to a JSON lines log file."""

    def __init__(self, log_path="data/alerts.jsonl"):
        self.log_path = log_path

    def send(self, alert):
        entry = alert.to_dict()
        try:
            Path(self.log_path).parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a") as f:
                f.write(json.dumps(entry) + "\n")
        except OSError as e:
            logger.warning(f"Failed to write alert to file: {e}")
