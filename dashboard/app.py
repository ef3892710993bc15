"""Live terminal dashboard for alert state."""
import logging
import time
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from dashboard.panels import StatusPanel, AlertsPanel
from dashboard.theme import DASHBOARD_THEME

logger = logging.getLogger("agentwatch.dashboard")


class Dashboard:
    def __init__(self, monitor, config=None, console=None):
        self.monitor = monitor
        self.config = config or {}
        self.refresh_interval = self.config.get("dashboard", {}).get("refresh_interval", 2)
        self._running = False
        self._console = console or Console(theme=DASHBOARD_THEME)

    def _build_layout(self):
        layout = Layout()
        layout.split_column(
            Layout(name="status", size=4),
            Layout(name="alerts"),
        )
        return layout

    def status_data(self):
        status = self.monitor.status()
        status["lastCheck"] = self.monitor.last_check_time
        return status

    def render(self, layout=None, now=None):
        layout = layout or self._build_layout()
        layout["status"].update(StatusPanel.render(self.status_data(), now))
        layout["alerts"].update(AlertsPanel.render(self.monitor.store.active_alerts, now))
        return layout

    def run(self):
        """Launch the live terminal dashboard. Monitoring runs on the scheduler thread."""
        self._running = True
        layout = self._build_layout()
        try:
            with Live(layout, console=self._console, refresh_per_second=1, screen=True):
                while self._running:
                    self.render(layout)
                    time.sleep(self.refresh_interval)
        except KeyboardInterrupt:
            pass
        finally:
            self._running = False
            self._console.clear()
            self._console.print(f"[dim]Session ended. {self.monitor.store.total_active_alerts} active alert(s).[/dim]")
