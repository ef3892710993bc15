"""Monitoring status header."""
from rich.panel import Panel
from rich.text import Text
from utils.formatters import time_ago


class StatusPanel:
    @staticmethod
    def render(status, now=None):
        text = Text()
        if status.get("isMonitoring"):
            text.append("● MONITORING", style="ok")
        else:
            text.append("○ STOPPED", style="error")
        text.append(f"  rules: {status.get('enabledRules', 0)}/{status.get('rules', 0)} enabled")
        text.append(f"  every {status.get('checkIntervalSeconds')}s")

        last = status.get("lastCheck")
        text.append(f"  last check: {time_ago(last, now) if last else 'never'}", style="dim")

        if status.get("lastError"):
            text.append(f"\nerror: {status['lastError']}", style="error")
        return Panel(text, title="[bold cyan]AgentWatch[/bold cyan]", border_style="cyan")
