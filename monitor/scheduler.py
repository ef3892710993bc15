"""Background scheduler for periodic alert rule evaluation."""
import logging
import threading
import schedule

logger = logging.getLogger("agentwatch.scheduler")


class AlertScheduler:
    def __init__(self, monitor, interval_seconds=None, poll_seconds=1, join_timeout=5):
        self.monitor = monitor
        self.interval = interval_seconds or monitor.check_interval_seconds
        self.poll_seconds = poll_seconds
        self.join_timeout = join_timeout
        self._scheduler = None
        self._stop_event = None
        self._thread = None
        self._callbacks = []
        self._consecutive_failures = 0

    @property
    def running(self):
        return self._stop_event is not None and not self._stop_event.is_set()

    def on_pass(self, callback):
        """Register callback called with the new alerts after each pass."""
        self._callbacks.append(callback)

    def start(self):
        """Start background evaluation."""
        if self.running:
            return
        # Each run owns its scheduler and stop event; a thread left over from a previous run
        # only ever sees its own, already set, event.
        self._stop_event = threading.Event()
        self._scheduler = schedule.Scheduler()
        self._scheduler.every(self.interval).seconds.do(self._check_job)

        self._thread = threading.Thread(target=self._run_loop, args=(self._scheduler, self._stop_event),
                                        name="agentwatch-alerts", daemon=True)
        self._thread.start()
        logger.info(f"Scheduler started (every {self.interval}s)")

    def stop(self):
        """Stop background evaluation. An in-flight pass finishes on its own."""
        if not self.running:
            return
        self._stop_event.set()
        self._scheduler.clear()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.join_timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler thread still finishing a pass after stop")
        self._thread = None
        logger.info("Scheduler stopped")

    def _run_loop(self, scheduler, stop_event):
        # Do an initial check immediately
        self._check_job()
        while not stop_event.is_set():
            scheduler.run_pending()
            stop_event.wait(self.poll_seconds)

    def _check_job(self):
        if not self.monitor.is_monitoring:
            return
        new_alerts = self.monitor.check_alert_rules()
        if self.monitor.last_error:
            self._consecutive_failures += 1
            logger.error(f"Alert pass failed ({self._consecutive_failures} consecutive): "
                         f"{self.monitor.last_error}")
            if self._consecutive_failures >= 5:
                logger.critical("5+ consecutive alert pass failures!")
        else:
            self._consecutive_failures = 0
        for cb in self._callbacks:
            try:
                cb(new_alerts)
            except Exception as e:
                logger.warning(f"Callback error: {e}")
