"""WSGI entry point for production deployment."""
import sys
import os
import logging
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).parent))

# Ensure data directory exists
Path("data").mkdir(exist_ok=True)

from main import _init_components
from web.app import create_app

logger = logging.getLogger("agentwatch.wsgi")

components = _init_components(os.environ.get("AGENTWATCH_CONFIG"), interactive=False)
monitor = components["monitor"]
monitor.attach_scheduler(components["scheduler"])

app = create_app(components["config"], {"monitor": monitor, "rules": components["rules"]})

# Start evaluating as soon as the worker boots
if monitor.auto_start():
    logger.info(f"Alert monitoring started with {len(components['rules'].get_enabled_rules())} enabled rule(s)")
else:
    logger.warning("Alert monitoring not started: no rules configured or monitoring disabled")
