"""Active alerts panel."""
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from alerts.analytics import sort_by_priority
from utils.formatters import SEVERITY_COLORS, format_metric_value, time_ago


class AlertsPanel:
    @staticmethod
    def render(active_alerts=None, now=None, limit=8):
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("info")

        # Overall status
        if not active_alerts:
            table.add_row("[ok]ALL CLEAR[/ok] - No active alerts")
        else:
            crits = sum(1 for a in active_alerts if a.severity == "critical")
            highs = sum(1 for a in active_alerts if a.severity == "high")
            unacked = sum(1 for a in active_alerts if not a.acknowledged)
            if crits > 0:
                table.add_row(f"[critical]!!! {crits} CRITICAL[/critical] | {highs} high | {unacked} unacknowledged")
            elif highs > 0:
                table.add_row(f"[high]!! {highs} HIGH[/high] | {unacked} unacknowledged")
            else:
                table.add_row(f"[medium]{len(active_alerts)} active[/medium] | {unacked} unacknowledged")

        if active_alerts:
            for alert in sort_by_priority(active_alerts)[:limit]:
                style = alert.severity if alert.severity in SEVERITY_COLORS else "white"
                ack = "[dim]ack[/dim] " if alert.acknowledged else ""
                value = format_metric_value(alert.metric, alert.current_value)
                table.add_row(
                    f"[{style}]\\[{alert.severity[:4].upper()}] {escape(alert.rule_name)}[/{style}] "
                    f"{value} {ack}[dim]{time_ago(alert.timestamp, now)}[/dim]"
                )
            if len(active_alerts) > limit:
                table.add_row(f"[dim]... and {len(active_alerts) - limit} more[/dim]")

        return Panel(table, title="[bold yellow]Active Alerts[/bold yellow]", border_style="yellow")
