"""
Flask JSON API for AgentWatch alert monitoring.

Read endpoints:
  GET  /api/status              - Monitoring flag, last check, last error, counts
  GET  /api/alerts              - Active alerts (priority order) + derived counts
  GET  /api/alerts/history      - Filtered alert history (?search=&severity=&status=&range=)
  GET  /api/alerts/analytics    - Severity distribution, daily trend, resolution stats
  GET  /api/alerts/export       - Downloadable JSON report
  GET  /api/rules               - Configured alert rules

Control endpoints:
  POST /api/alerts/<id>/acknowledge
  POST /api/alerts/<id>/resolve   {"resolved_by": "..."}
  POST /api/alerts/clear
  POST /api/alerts/check          - Manual evaluation pass
  POST /api/monitoring/start
  POST /api/monitoring/stop

Started via: python main.py web [--port 5000] [--host 127.0.0.1]
"""
import json
import logging

from flask import Flask, jsonify, request, Response

from alerts.analytics import (
    build_export, compute_analytics, default_export_filename, filter_history, sort_by_priority,
)

logger = logging.getLogger("agentwatch.web.app")


def create_app(config: dict, engines: dict) -> Flask:
    """
    Factory function. Receives initialized engines from main.py CLI.

    Args:
        config: Application config dict
        engines: dict with at least "monitor" (AlertMonitor) and "rules" (RulesManager)
    """
    app = Flask(__name__)
    monitor = engines["monitor"]
    rules = engines["rules"]

    def _history_filters():
        return {
            "search": request.args.get("search") or None,
            "severity": request.args.get("severity") or None,
            "status": request.args.get("status", "all"),
            "date_range": request.args.get("range", "all"),
        }

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return jsonify({"error": str(e)}), 400

    @app.route("/api/status")
    def api_status():
        return jsonify(monitor.status())

    @app.route("/api/alerts")
    def api_alerts():
        store = monitor.store
        active = sort_by_priority(store.active_alerts)
        return jsonify({
            "alerts": [a.to_dict() for a in active],
            "criticalAlerts": len(store.critical_alerts),
            "highAlerts": len(store.high_alerts),
            "unacknowledgedAlerts": len(store.unacknowledged_alerts),
            "totalActiveAlerts": len(active),
            "isMonitoring": monitor.is_monitoring,
            "lastError": monitor.last_error,
        })

    @app.route("/api/alerts/history")
    def api_history():
        limit = min(int(request.args.get("limit", 100)), 1000)
        filtered = filter_history(monitor.store.alert_history, **_history_filters())
        return jsonify({"alerts": [a.to_dict() for a in filtered[:limit]], "count": len(filtered)})

    @app.route("/api/alerts/analytics")
    def api_analytics():
        days = min(int(request.args.get("days", 7)), 90)
        return jsonify(compute_analytics(monitor.store.alert_history, days=days))

    @app.route("/api/alerts/export")
    def api_export():
        report = build_export(monitor.store.alert_history, _history_filters())
        return Response(
            json.dumps(report, indent=2),
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={default_export_filename()}"},
        )

    @app.route("/api/alerts/<alert_id>/acknowledge", methods=["POST"])
    def api_acknowledge(alert_id):
        if not monitor.acknowledge_alert(alert_id):
            return jsonify({"error": f"Alert not found: {alert_id}"}), 404
        return jsonify({"ok": True, "id": alert_id})

    @app.route("/api/alerts/<alert_id>/resolve", methods=["POST"])
    def api_resolve(alert_id):
        body = request.get_json(silent=True) or {}
        if not monitor.resolve_alert(alert_id, body.get("resolved_by")):
            return jsonify({"error": f"Alert not found: {alert_id}"}), 404
        return jsonify({"ok": True, "id": alert_id})

    @app.route("/api/alerts/clear", methods=["POST"])
    def api_clear():
        cleared = monitor.clear_all_alerts()
        return jsonify({"ok": True, "cleared": cleared})

    @app.route("/api/alerts/check", methods=["POST"])
    def api_check():
        new_alerts = monitor.check_alert_rules()
        return jsonify({
            "alerts": [a.to_dict() for a in new_alerts],
            "count": len(new_alerts),
            "lastError": monitor.last_error,
        })

    @app.route("/api/monitoring/start", methods=["POST"])
    def api_start():
        monitor.start_monitoring()
        return jsonify(monitor.status())

    @app.route("/api/monitoring/stop", methods=["POST"])
    def api_stop():
        monitor.stop_monitoring()
        return jsonify(monitor.status())

    @app.route("/api/rules")
    def api_rules():
        all_rules = rules.get_all_rules()
        return jsonify({"rules": [r.to_dict() for r in all_rules], "count": len(all_rules)})

    return app
