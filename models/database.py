"""SQLite database for storing agent telemetry: performance, system metrics, execution and error logs."""
import sqlite3
import logging
from datetime import datetime, timezone, timedelta
from pathlib import Path
from models.telemetry import PerformanceLog, SystemMetric, ExecutionLog, ErrorLog

logger = logging.getLogger("agentwatch.db")


def _to_iso(ts):
    if ts is None:
        ts = datetime.now(timezone.utc)
    if isinstance(ts, str):
        ts = parse_timestamp(ts)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def parse_timestamp(value):
    """Parse an ISO timestamp into an aware UTC datetime."""
    if isinstance(value, datetime):
        ts = value
    else:
        ts = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class Database:
    def __init__(self, db_path="data/agentwatch.db"):
        self.db_path = db_path
        self.conn = None

    def connect(self):
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL")
        self._create_tables()
        return self

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, *args):
        self.close()

    def _create_tables(self):
        self.conn.executescript("""
            CREATE TABLE IF NOT EXISTS performance_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                duration_ms REAL,
                operation TEXT DEFAULT ''
            );

            CREATE INDEX IF NOT EXISTS idx_perf_timestamp
                ON performance_logs(timestamp);

            CREATE TABLE IF NOT EXISTS system_metrics (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                metric_type TEXT NOT NULL,
                value REAL NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_sysmetrics_timestamp
                ON system_metrics(timestamp);

            CREATE TABLE IF NOT EXISTS execution_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                level TEXT DEFAULT 'info',
                message TEXT DEFAULT ''
            );

            CREATE INDEX IF NOT EXISTS idx_exec_timestamp
                ON execution_logs(timestamp);

            CREATE TABLE IF NOT EXISTS error_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT NOT NULL,
                severity TEXT DEFAULT 'error',
                message TEXT DEFAULT ''
            );

            CREATE INDEX IF NOT EXISTS idx_errors_timestamp
                ON error_logs(timestamp);
        """)
        self.conn.commit()

    # --- Writers ---

    def record_performance(self, duration_ms, operation="", timestamp=None):
        self.conn.execute(
            "INSERT INTO performance_logs (timestamp, duration_ms, operation) VALUES (?, ?, ?)",
            (_to_iso(timestamp), float(duration_ms), operation),
        )
        self.conn.commit()

    def record_system_metric(self, metric_type, value, timestamp=None):
        self.conn.execute(
            "INSERT INTO system_metrics (timestamp, metric_type, value) VALUES (?, ?, ?)",
            (_to_iso(timestamp), metric_type, float(value)),
        )
        self.conn.commit()

    def record_execution(self, message="", level="info", timestamp=None):
        self.conn.execute(
            "INSERT INTO execution_logs (timestamp, level, message) VALUES (?, ?, ?)",
            (_to_iso(timestamp), level, message),
        )
        self.conn.commit()

    def record_error(self, message="", severity="error", timestamp=None):
        self.conn.execute(
            "INSERT INTO error_logs (timestamp, severity, message) VALUES (?, ?, ?)",
            (_to_iso(timestamp), severity, message),
        )
        self.conn.commit()

    # --- Readers (most recent first) ---

    def get_recent_performance_logs(self, limit=100):
        rows = self.conn.execute("""
            SELECT * FROM performance_logs ORDER BY timestamp DESC LIMIT ?
        """, (limit,)).fetchall()
        return [PerformanceLog(timestamp=parse_timestamp(r["timestamp"]),
                               duration=r["duration_ms"] or 0.0,
                               operation=r["operation"] or "") for r in rows]

    def get_recent_system_metrics(self, hours=1):
        cutoff = (datetime.now(timezone.utc) - timedelta(hours=hours)).isoformat()
        rows = self.conn.execute("""
            SELECT * FROM system_metrics WHERE timestamp >= ? ORDER BY timestamp DESC
        """, (cutoff,)).fetchall()
        return [SystemMetric(timestamp=parse_timestamp(r["timestamp"]),
                             type=r["metric_type"], value=r["value"]) for r in rows]

    def get_recent_execution_logs(self, limit=100, since=None):
        """Newest first. With since, only rows strictly after it; limit=None means no cap."""
        query = "SELECT * FROM execution_logs"
        params = []
        if since is not None:
            query += " WHERE timestamp > ?"
            params.append(_to_iso(since))
        query += " ORDER BY timestamp DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        rows = self.conn.execute(query, params).fetchall()
        return [ExecutionLog(timestamp=parse_timestamp(r["timestamp"]),
                             level=r["level"] or "info", message=r["message"] or "") for r in rows]

    def get_recent_error_logs(self, limit=50):
        rows = self.conn.execute("""
            SELECT * FROM error_logs ORDER BY timestamp DESC LIMIT ?
        """, (limit,)).fetchall()
        return [ErrorLog(timestamp=parse_timestamp(r["timestamp"]),
                         severity=r["severity"] or "error", message=r["message"] or "") for r in rows]

    def get_table_counts(self):
        counts = {}
        for table in ("performance_logs", "system_metrics", "execution_logs", "error_logs"):
            counts[table] = self.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        return counts
