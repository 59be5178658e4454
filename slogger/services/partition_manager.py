import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from ..errors import StorageError

log = logging.getLogger(__name__)


def utc_day(value: date | datetime) -> date:
    """Calendar day in UTC. Naive datetimes are taken as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def day_bounds(value: date | datetime) -> tuple[datetime, datetime]:
    start = datetime.combine(utc_day(value), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def partition_name(value: date | datetime) -> str:
    d = utc_day(value)
    return f"logs_{d.year:04d}_{d.month:02d}_{d.day:02d}"


@dataclass
class SweepReport:
    ensured: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class PartitionManager:
    """
    Keeps one partition per UTC day.

    `store` needs create_partition(name, start, end) and list_partitions();
    the storage engine makes creation idempotent, so there is no locking here.
    """

    def __init__(self, store, clock=None):
        self.store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def ensure_partition_for_date(self, day: date | datetime) -> str:
        start, end = day_bounds(day)
        name = partition_name(start)
        self.store.create_partition(name, start, end)
        return name

    def ensure_partitions(self, days_ahead: int = 7) -> SweepReport:
        """
        today .. today+days_ahead (inclusive, UTC). A failed day does not stop
        the sweep; failures are collected in the report.
        """
        report = SweepReport()
        today = utc_day(self._clock())
        for i in range(days_ahead + 1):
            day = today + timedelta(days=i)
            try:
                self.ensure_partition_for_date(day)
            except StorageError as e:
                log.error("PARTITION ensure failed day=%s error=%s", day.isoformat(), e.message)
                report.failed[day] = e.message
                continue
            report.ensured.append(day)
        log.info("PARTITION sweep ensured=%s failed=%s", len(report.ensured), len(report.failed))
        return report

    def list_partitions(self) -> list[str]:
        return self.store.list_partitions()
