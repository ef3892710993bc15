#!/usr/bin/env python3
"""AgentWatch - CLI Entry Point."""
import sys
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from __version__ import __version__

console = Console()
logger = logging.getLogger("agentwatch.cli")


def _init_components(config_path=None, verbose=False, interactive=None):
    """Lazy initialization of all components."""
    from utils.logger import setup_logging
    from config import load_config
    from models.database import Database
    from monitor.telemetry import TelemetryProvider
    from monitor.scheduler import AlertScheduler
    from alerts.rules_manager import RulesManager
    from alerts.engine import AlertMonitor
    from alerts.channels import ConsoleChannel, FileChannel

    config = load_config(config_path)
    log_cfg = config.get("logging", {})
    setup_logging("DEBUG" if verbose else log_cfg.get("level", "INFO"), log_cfg.get("file"))

    db = Database(config["database"]["path"])
    db.connect()

    telemetry = TelemetryProvider(db, config)
    alerts_cfg = config["alerts"]
    rules = RulesManager(alerts_cfg.get("rules_path", "config/alerts_rules.yaml"))

    channels = [FileChannel(alerts_cfg.get("log_path", "data/alerts.jsonl"))]  # Always log to file

    # Console only if running interactively
    if interactive is None:
        interactive = sys.stdout.isatty()
    if interactive and alerts_cfg.get("console", True):
        channels.append(ConsoleChannel(console))

    mon_cfg = config["monitoring"]
    monitor = AlertMonitor(
        rules, telemetry, channels=channels,
        check_interval_seconds=mon_cfg["check_interval_seconds"],
        enabled=mon_cfg.get("enabled", True),
        window_minutes=mon_cfg.get("metric_window_minutes", 5),
    )
    scheduler = AlertScheduler(monitor)

    return {
        "config": config, "db": db, "telemetry": telemetry, "rules": rules,
        "monitor": monitor, "scheduler": scheduler,
    }


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config YAML")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="agentwatch")
@click.pass_context
def cli(ctx, config_path, verbose):
    """AgentWatch - Alert monitoring for AI agent telemetry."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _get_components(ctx):
    if "_components" not in ctx.obj:
        ctx.obj["_components"] = _init_components(ctx.obj.get("config_path"), ctx.obj.get("verbose"))
    return ctx.obj["_components"]


# ──────────────────────────────────────────────────────
# SETUP
# ──────────────────────────────────────────────────────
@cli.command()
@click.pass_context
def setup(ctx):
    """First-time setup: initialize DB and validate alert rules."""
    c = _get_components(ctx)
    console.print("[bold cyan]AgentWatch - Setup[/bold cyan]\n")
    console.print(f"[green]✓[/green] Database initialized at {c['db'].db_path}")

    rules = c["rules"].get_all_rules()
    enabled = c["rules"].get_enabled_rules()
    if rules:
        console.print(f"[green]✓[/green] {len(rules)} alert rules loaded ({len(enabled)} enabled)")
    else:
        console.print("[yellow]![/yellow] No alert rules configured - add one with 'rules add'")

    counts = c["db"].get_table_counts()
    console.print("[green]✓[/green] Telemetry rows: " +
                  ", ".join(f"{k}={v}" for k, v in counts.items()))


# ──────────────────────────────────────────────────────
# ALERTS
# ──────────────────────────────────────────────────────
@cli.group()
def alerts():
    """Alert evaluation."""
    pass


@alerts.command("check")
@click.pass_context
def alerts_check(ctx):
    """Run one evaluation pass against the latest telemetry."""
    c = _get_components(ctx)
    monitor = c["monitor"]
    monitor.store.set_monitoring(True)
    triggered = monitor.check_alert_rules()
    if monitor.last_error:
        console.print(f"[red]Check failed: {escape(monitor.last_error)}[/red]")
        ctx.exit(1)
    if triggered:
        console.print(f"[bold yellow]{len(triggered)} alert(s) triggered:[/bold yellow]")
        for a in triggered:
            console.print(f"  [{a.severity.upper()}] {escape(a.message)}", highlight=False, soft_wrap=True)
    else:
        console.print("[green]All clear - no alerts triggered[/green]")


@alerts.command("test")
@click.pass_context
def alerts_test(ctx):
    """Test all rules (ignore cooldowns and enabled flags) against latest telemetry."""
    from utils.formatters import format_condition, format_metric_value
    c = _get_components(ctx)
    results = c["monitor"].test_rules()

    table = Table(title="Alert Rules Test", show_header=True)
    table.add_column("Rule")
    table.add_column("Metric")
    table.add_column("Condition")
    table.add_column("Current")
    table.add_column("Would Fire")
    table.add_column("Enabled")

    for r in results:
        fire_str = "[green]YES[/green]" if r["would_fire"] else "[dim]no[/dim]"
        en_str = "✓" if r["enabled"] else "✗"
        table.add_row(escape(r["name"]), r["metric"], format_condition(r["condition"], r["threshold"]),
                      format_metric_value(r["metric"], r["current_value"]), fire_str, en_str)
    console.print(table)


@alerts.command("rules")
@click.pass_context
def alerts_rules(ctx):
    """List all configured alert rules."""
    from utils.formatters import format_condition, format_severity
    c = _get_components(ctx)
    rules = c["rules"].get_all_rules()
    if not rules:
        console.print("[dim]No alert rules configured[/dim]")
        return
    table = Table(title="Alert Rules", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Condition")
    table.add_column("Severity")
    table.add_column("Cooldown")
    table.add_column("Enabled")
    for r in rules:
        table.add_row(r.id, escape(r.name), f"{r.metric} {format_condition(r.condition, r.threshold)}",
                      format_severity(r.severity), f"{r.cooldown_minutes}m",
                      "[green]✓[/green]" if r.enabled else "[red]✗[/red]")
    console.print(table)


# ──────────────────────────────────────────────────────
# RULES
# ──────────────────────────────────────────────────────
@cli.group()
def rules():
    """Create, delete and toggle alert rules."""
    pass


@rules.command("add")
@click.option("--name", required=True, help="Rule name used in alert messages")
@click.option("--metric", required=True, type=click.Choice(
    ["response_time", "error_rate", "memory_usage", "cpu_usage", "log_volume", "active_sessions"]))
@click.option("--condition", default="greater_than", type=click.Choice(["greater_than", "less_than", "equals"]))
@click.option("--threshold", required=True, type=float)
@click.option("--severity", default="medium", type=click.Choice(["low", "medium", "high", "critical"]))
@click.option("--cooldown", "cooldown_minutes", default=5, type=click.IntRange(min=0), help="Cooldown in minutes")
@click.option("--description", default="")
@click.option("--disabled", is_flag=True, help="Create the rule disabled")
@click.pass_context
def rules_add(ctx, name, metric, condition, threshold, severity, cooldown_minutes, description, disabled):
    """Add an alert rule and save the rules file."""
    from alerts.rules_manager import RuleValidationError
    c = _get_components(ctx)
    try:
        rule = c["rules"].add_rule({
            "name": name, "metric": metric, "condition": condition, "threshold": threshold,
            "severity": severity, "cooldown_minutes": cooldown_minutes,
            "description": description, "enabled": not disabled,
        })
    except RuleValidationError as e:
        console.print(f"[red]Invalid rule: {escape(str(e))}[/red]")
        ctx.exit(1)
    c["rules"].save()
    console.print(f"[green]✓[/green] Rule created: {rule.id}")


@rules.command("delete")
@click.argument("rule_id")
@click.pass_context
def rules_delete(ctx, rule_id):
    """Delete an alert rule."""
    c = _get_components(ctx)
    if not c["rules"].delete_rule(rule_id):
        console.print(f"[red]No rule with id {escape(rule_id)}[/red]")
        ctx.exit(1)
    c["rules"].save()
    console.print(f"[green]✓[/green] Rule deleted: {rule_id}")


@rules.command("toggle")
@click.argument("rule_id")
@click.option("--on/--off", "enabled", default=True, help="Enable or disable the rule")
@click.pass_context
def rules_toggle(ctx, rule_id, enabled):
    """Enable or disable an alert rule."""
    c = _get_components(ctx)
    if c["rules"].toggle_rule(rule_id, enabled) is None:
        console.print(f"[red]No rule with id {escape(rule_id)}[/red]")
        ctx.exit(1)
    c["rules"].save()
    console.print(f"[green]✓[/green] Rule {rule_id} {'enabled' if enabled else 'disabled'}")


# ──────────────────────────────────────────────────────
# TELEMETRY
# ──────────────────────────────────────────────────────
@cli.group()
def telemetry():
    """Telemetry ingestion and status."""
    pass


@telemetry.command("ingest")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def telemetry_ingest(ctx, path):
    """Load JSON-lines telemetry rows (each tagged with a 'kind')."""
    c = _get_components(ctx)
    added, skipped = c["telemetry"].ingest_jsonl(path)
    console.print(f"[green]✓[/green] Ingested {added} rows" +
                  (f" [yellow]({skipped} skipped)[/yellow]" if skipped else ""))


@telemetry.command("record")
@click.argument("kind", type=click.Choice(["performance", "system", "execution", "error"]))
@click.option("--value", type=float, default=0.0, help="Duration (performance) or value (system)")
@click.option("--type", "metric_type", default=None, help="System metric type, e.g. cpu_usage")
@click.option("--message", default="", help="Message for execution/error rows")
@click.pass_context
def telemetry_record(ctx, kind, value, metric_type, message):
    """Record a single telemetry row timestamped now."""
    c = _get_components(ctx)
    if kind == "system" and not metric_type:
        console.print("[red]--type is required for system metrics[/red]")
        ctx.exit(1)
    c["telemetry"].record(kind, duration=value, value=value, type=metric_type, message=message)
    console.print(f"[green]✓[/green] Recorded {kind} row")


@telemetry.command("status")
@click.pass_context
def telemetry_status(ctx):
    """Show stored telemetry row counts."""
    c = _get_components(ctx)
    table = Table(title="Telemetry", show_header=True)
    table.add_column("Table", style="dim")
    table.add_column("Rows")
    for name, count in c["db"].get_table_counts().items():
        table.add_row(name, f"{count:,}")
    console.print(table)


# ──────────────────────────────────────────────────────
# MONITOR
# ──────────────────────────────────────────────────────
@cli.group()
def monitor():
    """Continuous alert monitoring."""
    pass


@monitor.command("run")
@click.option("--interval", default=None, type=click.IntRange(min=1), help="Seconds between passes")
@click.option("--export", "export_path", default=None, type=click.Path(dir_okay=False),
              help="Write the alert history report here on exit")
@click.pass_context
def monitor_run(ctx, interval, export_path):
    """Run the monitoring loop in the foreground until Ctrl+C."""
    from alerts.engine import run_forever
    c = _get_components(ctx)
    mon, scheduler = c["monitor"], c["scheduler"]
    if interval:
        scheduler.interval = interval
        mon.check_interval_seconds = interval
    mon.attach_scheduler(scheduler)

    if not mon.auto_start():
        console.print("[yellow]Monitoring not started: no rules configured or monitoring disabled[/yellow]")
        return
    console.print(f"[bold cyan]Monitoring {len(c['rules'].get_enabled_rules())} rule(s) "
                  f"every {scheduler.interval}s[/bold cyan] (Ctrl+C to stop)")
    run_forever(mon)
    if mon.is_monitoring:
        mon.stop_monitoring()

    history = mon.store.alert_history
    console.print(f"[dim]Session ended. {len(history)} alert(s) fired, "
                  f"{mon.store.total_active_alerts} still active.[/dim]")
    if export_path:
        from alerts.analytics import export_json
        Path(export_path).write_text(export_json(history))
        console.print(f"[green]✓[/green] Alert report written to {export_path}")


# ──────────────────────────────────────────────────────
# DASHBOARD / WEB
# ──────────────────────────────────────────────────────
@cli.command()
@click.option("--refresh", default=2, help="Refresh interval in seconds")
@click.pass_context
def dashboard(ctx, refresh):
    """Launch the live terminal dashboard (monitoring runs in the background)."""
    ctx.obj["_components"] = _init_components(ctx.obj.get("config_path"), ctx.obj.get("verbose"),
                                              interactive=False)
    c = ctx.obj["_components"]
    from dashboard.app import Dashboard
    mon = c["monitor"]
    mon.attach_scheduler(c["scheduler"])
    mon.auto_start()
    config = dict(c["config"])
    config["dashboard"] = {"refresh_interval": refresh}
    try:
        Dashboard(mon, config).run()
    finally:
        mon.stop_monitoring()


@cli.command()
@click.option("--port", default=None, type=int, help="Port to bind to")
@click.option("--host", default=None, type=str, help="Host to bind to")
@click.pass_context
def web(ctx, port, host):
    """Launch the JSON API with background monitoring."""
    c = _get_components(ctx)
    from web.app import create_app
    web_cfg = c["config"].get("web", {})
    host = host or web_cfg.get("host", "127.0.0.1")
    port = port or web_cfg.get("port", 5000)

    mon = c["monitor"]
    mon.attach_scheduler(c["scheduler"])
    mon.auto_start()

    app = create_app(c["config"], {"monitor": mon, "rules": c["rules"]})
    console.print(f"[bold cyan]AgentWatch API[/bold cyan] on http://{host}:{port}")
    try:
        app.run(host=host, port=port, debug=False, use_reloader=False)
    finally:
        mon.stop_monitoring()


if __name__ == "__main__":
    cli(obj={})
