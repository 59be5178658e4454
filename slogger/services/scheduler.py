import atexit
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

log = logging.getLogger(__name__)


class PartitionMaintenance:
    """
    Background partition sweep: once right after start(), then every
    `interval_hours`. Restartable; a failing sweep is logged and the next
    tick runs as usual.
    """

    JOB_ID = "partition_sweep"

    def __init__(self, sweep, interval_hours: int = 6):
        self._sweep = sweep
        self.interval_hours = interval_hours
        self._scheduler = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self):
        try:
            report = self._sweep()
        except Exception:
            log.exception("PARTITION sweep crashed")
            return None
        if report is not None and not report.ok:
            log.warning("PARTITION sweep incomplete failed_days=%s", sorted(d.isoformat() for d in report.failed))
        return report

    def start(self) -> None:
        if self.running:
            return

        self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(hours=self.interval_hours),
            id=self.JOB_ID,
            replace_existing=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self._scheduler.start()
        log.info("PARTITION maintenance started interval_hours=%s", self.interval_hours)

    def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        log.info("PARTITION maintenance stopped")


def start_scheduler(app) -> PartitionMaintenance:
    services = app.extensions["slogger"]
    if services.maintenance is not None:
        return services.maintenance

    days_ahead = app.config["PARTITION_DAYS_AHEAD"]

    def sweep():
        with app.app_context():
            return services.partitions.ensure_partitions(days_ahead)

    maintenance = PartitionMaintenance(sweep, interval_hours=app.config["PARTITION_SWEEP_HOURS"])
    maintenance.start()
    atexit.register(maintenance.stop)
    services.maintenance = maintenance
    return maintenance
