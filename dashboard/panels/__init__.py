"""Dashboard panels."""
from dashboard.panels.status_panel import StatusPanel
from dashboard.panels.alerts_panel import AlertsPanel
