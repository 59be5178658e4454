from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from slogger.errors import StorageError
from slogger.repositories.partition_repository import PartitionRepository, partition_ddl
from slogger.services.partition_manager import (
    PartitionManager,
    day_bounds,
    partition_name,
    utc_day,
)

from .fakes import FIXED_NOW, FakePartitionStore


class TestDayHelpers:

    def test_partition_name_is_derived_from_utc_day(self):
        assert partition_name(date(2025, 1, 5)) == "logs_2025_01_05"
        assert partition_name(datetime(2025, 1, 5, 23, 59, tzinfo=timezone.utc)) == "logs_2025_01_05"

    def test_non_utc_datetime_uses_utc_day(self):
        # 2025-01-06 01:00 at +03:00 is 2025-01-05 22:00 UTC
        tz = timezone(timedelta(hours=3))
        assert utc_day(datetime(2025, 1, 6, 1, 0, tzinfo=tz)) == date(2025, 1, 5)

    def test_day_bounds_are_half_open_utc_day(self):
        start, end = day_bounds(datetime(2025, 2, 28, 15, 30, tzinfo=timezone.utc))
        assert start == datetime(2025, 2, 28, tzinfo=timezone.utc)
        assert end == datetime(2025, 3, 1, tzinfo=timezone.utc)
        assert end - start == timedelta(days=1)


class TestEnsurePartitionForDate:

    def test_creates_partition_with_exact_bounds(self):
        store = FakePartitionStore()
        manager = PartitionManager(store)

        name = manager.ensure_partition_for_date(datetime(2025, 1, 1, 18, tzinfo=timezone.utc))

        assert name == "logs_2025_01_01"
        assert store.partitions[name] == (
            datetime(2025, 1, 1, tzinfo=timezone.utc),
            datetime(2025, 1, 2, tzinfo=timezone.utc),
        )

    def test_is_idempotent(self):
        store = FakePartitionStore()
        manager = PartitionManager(store)

        manager.ensure_partition_for_date(date(2025, 1, 1))
        manager.ensure_partition_for_date(date(2025, 1, 1))

        assert manager.list_partitions() == ["logs_2025_01_01"]

    def test_concurrent_callers_for_same_day(self):
        store = FakePartitionStore()
        manager = PartitionManager(store)

        with ThreadPoolExecutor(max_workers=8) as pool:
            names = list(pool.map(lambda _: manager.ensure_partition_for_date(date(2025, 1, 1)), range(16)))

        assert set(names) == {"logs_2025_01_01"}
        assert manager.list_partitions() == ["logs_2025_01_01"]

    def test_storage_failure_propagates(self):
        manager = PartitionManager(FakePartitionStore(fail_on={"logs_2025_01_01"}))
        with pytest.raises(StorageError):
            manager.ensure_partition_for_date(date(2025, 1, 1))


class TestEnsurePartitions:

    def test_sweeps_today_through_days_ahead_inclusive(self):
        store = FakePartitionStore()
        manager = PartitionManager(store, clock=lambda: FIXED_NOW)

        report = manager.ensure_partitions(days_ahead=7)

        assert report.ok
        assert len(report.ensured) == 8
        assert report.ensured[0] == date(2025, 3, 10)
        assert report.ensured[-1] == date(2025, 3, 17)
        assert store.list_partitions() == [f"logs_2025_03_{d:02d}" for d in range(10, 18)]

    def test_default_window_is_seven_days(self):
        manager = PartitionManager(FakePartitionStore(), clock=lambda: FIXED_NOW)
        assert len(manager.ensure_partitions().ensured) == 8

    def test_failed_day_does_not_abort_sweep(self):
        store = FakePartitionStore(fail_on={"logs_2025_03_11"})
        manager = PartitionManager(store, clock=lambda: FIXED_NOW)

        report = manager.ensure_partitions(days_ahead=3)

        assert not report.ok
        assert list(report.failed) == [date(2025, 3, 11)]
        assert report.ensured == [date(2025, 3, 10), date(2025, 3, 12), date(2025, 3, 13)]

    def test_zero_days_ahead_is_just_today(self):
        manager = PartitionManager(FakePartitionStore(), clock=lambda: FIXED_NOW)
        assert manager.ensure_partitions(days_ahead=0).ensured == [date(2025, 3, 10)]


class TestRegistryPartitions:
    """Partition contract on engines without declarative partitioning (sqlite)."""

    def test_create_and_list(self, partition_repository):
        manager = PartitionManager(partition_repository)
        manager.ensure_partition_for_date(date(2025, 1, 2))
        manager.ensure_partition_for_date(date(2025, 1, 1))

        assert manager.list_partitions() == ["logs_2025_01_01", "logs_2025_01_02"]

    def test_second_session_sees_existing_partition(self, engine, partition_repository):
        PartitionManager(partition_repository).ensure_partition_for_date(date(2025, 1, 1))

        other = PartitionRepository(sessionmaker(bind=engine)())
        PartitionManager(other).ensure_partition_for_date(date(2025, 1, 1))

        assert other.list_partitions() == ["logs_2025_01_01"]

    def test_lost_race_is_not_an_error(self, engine, session, partition_repository):
        # another worker registers the day between our existence check and insert
        other = PartitionRepository(sessionmaker(bind=engine)())
        PartitionManager(other).ensure_partition_for_date(date(2025, 1, 1))

        real_get = session.get
        calls = []

        def racing_get(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real_get(*args, **kwargs)

        with patch.object(session, "get", side_effect=racing_get):
            PartitionManager(partition_repository).ensure_partition_for_date(date(2025, 1, 1))

        assert len(calls) == 2
        assert partition_repository.list_partitions() == ["logs_2025_01_01"]

    def test_integrity_error_without_row_is_storage_error(self, session, partition_repository):
        with patch.object(session, "get", return_value=None), \
                patch.object(session, "commit", side_effect=IntegrityError("INSERT", {}, Exception("boom"))):
            with pytest.raises(StorageError):
                partition_repository.create_partition(
                    "logs_2025_01_01",
                    datetime(2025, 1, 1, tzinfo=timezone.utc),
                    datetime(2025, 1, 2, tzinfo=timezone.utc),
                )


class TestPostgresPartitionDDL:

    def test_ddl_covers_half_open_day(self):
        start, end = day_bounds(date(2025, 1, 1))
        ddl = partition_ddl("logs_2025_01_01", start, end)

        assert ddl == (
            'CREATE TABLE IF NOT EXISTS "logs_2025_01_01" PARTITION OF logs '
            "FOR VALUES FROM ('2025-01-01T00:00:00+00:00') TO ('2025-01-02T00:00:00+00:00')"
        )

    @pytest.mark.parametrize("name", ["logs", "logs_2025_1_1", 'logs_2025_01_01"; DROP TABLE logs; --'])
    def test_rejects_unexpected_names(self, name):
        start, end = day_bounds(date(2025, 1, 1))
        with pytest.raises(ValueError):
            partition_ddl(name, start, end)

    def test_years_below_1000_are_zero_padded(self):
        start, end = day_bounds(date(999, 1, 1))
        name = partition_name(start)

        assert name == "logs_0999_01_01"
        assert partition_ddl(name, start, end).startswith('CREATE TABLE IF NOT EXISTS "logs_0999_01_01"')
