"""Telemetry accessors: read recent rows from the database for one evaluation pass."""
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from models.telemetry import TelemetrySnapshot

logger = logging.getLogger("agentwatch.monitor.telemetry")

INGEST_KINDS = ("performance", "system", "execution", "error")


class TelemetryProvider:
    def __init__(self, db, config=None, clock=None):
        self.db = db
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        config = config or {}
        cfg = config.get("telemetry", {})
        self.performance_limit = cfg.get("performance_limit", 100)
        self.system_metrics_hours = cfg.get("system_metrics_hours", 1)
        # Execution rows are counted for log_volume, so they are bounded by the window, not a cap
        self.execution_limit = cfg.get("execution_limit")
        self.execution_window_minutes = config.get("monitoring", {}).get("metric_window_minutes", 5)
        self.error_limit = cfg.get("error_limit", 50)

    def get_recent_performance_logs(self):
        return self.db.get_recent_performance_logs(limit=self.performance_limit)

    def get_recent_system_metrics(self):
        return self.db.get_recent_system_metrics(hours=self.system_metrics_hours)

    def get_recent_execution_logs(self):
        since = self.clock() - timedelta(minutes=self.execution_window_minutes)
        return self.db.get_recent_execution_logs(limit=self.execution_limit, since=since)

    def get_recent_error_logs(self):
        return self.db.get_recent_error_logs(limit=self.error_limit)

    def fetch_snapshot(self):
        """Fetch all telemetry needed for one pass. Errors propagate to the caller."""
        snapshot = TelemetrySnapshot(
            performance_logs=self.get_recent_performance_logs(),
            system_metrics=self.get_recent_system_metrics(),
            execution_logs=self.get_recent_execution_logs(),
            error_logs=self.get_recent_error_logs(),
            fetched_at=self.clock(),
        )
        logger.debug(
            f"Telemetry: {len(snapshot.performance_logs)} perf, {len(snapshot.system_metrics)} system, "
            f"{len(snapshot.execution_logs)} exec, {len(snapshot.error_logs)} error rows"
        )
        return snapshot

    def record(self, kind, **fields):
        """Write a single telemetry row of the given kind."""
        ts = fields.get("timestamp")
        if kind == "performance":
            self.db.record_performance(fields.get("duration", fields.get("duration_ms", 0)),
                                       operation=fields.get("operation", ""), timestamp=ts)
        elif kind == "system":
            metric_type = fields.get("type") or fields.get("metric_type")
            if not metric_type:
                raise ValueError("System metric type is required")
            self.db.record_system_metric(metric_type, fields.get("value", 0), timestamp=ts)
        elif kind == "execution":
            self.db.record_execution(fields.get("message", ""), level=fields.get("level", "info"),
                                     timestamp=ts)
        elif kind == "error":
            self.db.record_error(fields.get("message", ""), severity=fields.get("severity", "error"),
                                 timestamp=ts)
        else:
            raise ValueError(f"Unknown telemetry kind: {kind}")

    def ingest_jsonl(self, path):
        """Load JSON-lines rows tagged with a 'kind' field. Returns (added, skipped)."""
        added, skipped = 0, 0
        with open(Path(path)) as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    row = json.loads(line)
                    kind = row.pop("kind")
                    self.record(kind, **row)
                    added += 1
                except (ValueError, KeyError, TypeError) as e:
                    skipped += 1
                    logger.warning(f"Skipping line {lineno} of {path}: {e}")
        logger.info(f"Ingested {added} telemetry rows from {path} ({skipped} skipped)")
        return added, skipped
