"""Dashboard color theme and styles."""
from rich.theme import Theme
from utils.formatters import SEVERITY_COLORS

# Severity names double as style names, so panels can write [critical]...[/critical]
DASHBOARD_THEME = Theme({
    "ok": "bold green",
    "error": "bold red",
    **{severity: f"bold {color}" for severity, color in SEVERITY_COLORS.items()},
})
