import re
from datetime import datetime

from sqlalchemy import select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..models import LogEntry, LogPartition
from .base_repository import BaseRepository

PARTITION_NAME_RE = re.compile(r"^logs_\d{4}_\d{2}_\d{2}$")

# PostgreSQL: logs is a range-partitioned parent, one child table per UTC day
PG_STORAGE_DDL = [
    """
    CREATE TABLE IF NOT EXISTS logs (
        id BIGSERIAL NOT NULL,
        source TEXT NOT NULL,
        props JSONB NOT NULL,
        "time" TIMESTAMPTZ NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (id, "time")
    ) PARTITION BY RANGE ("time")
    """,
    "CREATE INDEX IF NOT EXISTS ix_logs_source ON logs (source)",
    'CREATE INDEX IF NOT EXISTS ix_logs_time ON logs ("time" DESC, id DESC)',
    "CREATE INDEX IF NOT EXISTS ix_logs_props_fts ON logs USING GIN (to_tsvector('simple', props))",
]

PG_LIST_PARTITIONS = text(
    """
    SELECT c.relname
    FROM pg_inherits i
    JOIN pg_class c ON c.oid = i.inhrelid
    JOIN pg_class p ON p.oid = i.inhparent
    WHERE p.relname = :parent
    ORDER BY c.relname
    """
)


def partition_ddl(name: str, start: datetime, end: datetime) -> str:
    # DDL cannot bind parameters: name and bounds are generated from a date, never user input
    if not PARTITION_NAME_RE.match(name):
        raise ValueError(f"invalid partition name: {name!r}")
    return (
        f'CREATE TABLE IF NOT EXISTS "{name}" PARTITION OF logs '
        f"FOR VALUES FROM ('{start.isoformat()}') TO ('{end.isoformat()}')"
    )


class PartitionRepository(BaseRepository):
    """
    Storage side of day partitions.

    PostgreSQL gets native declarative partitions. Engines without them
    (sqlite in dev/tests) keep the same contract through the log_partitions
    registry: unique name per day, idempotent create, listable.
    """

    def ensure_storage(self) -> None:
        try:
            if self.is_postgres:
                for ddl in PG_STORAGE_DDL:
                    self.session.execute(text(ddl))
                self.session.commit()
            else:
                bind = self.session.get_bind()
                LogEntry.metadata.create_all(
                    bind=bind, tables=[LogEntry.__table__, LogPartition.__table__]
                )
        except SQLAlchemyError as e:
            raise self._fail("storage bootstrap", e) from e

    def create_partition(self, name: str, start: datetime, end: datetime) -> None:
        """Create-if-absent for [start, end). Concurrent callers for the same name both succeed."""
        if self.is_postgres:
            self._create_pg_partition(name, start, end)
        else:
            self._register_partition(name, start, end)

    def _create_pg_partition(self, name: str, start: datetime, end: datetime) -> None:
        ddl = partition_ddl(name, start, end)
        try:
            self._begin()
            # serializes creators of the same day; released at commit
            self.session.execute(text("SELECT pg_advisory_xact_lock(hashtext(:name))"), {"name": name})
            self.session.execute(text(ddl))
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"partition create {name}", e) from e

    def _register_partition(self, name: str, start: datetime, end: datetime) -> None:
        try:
            if self.session.get(LogPartition, name) is not None:
                self.session.commit()
                return
            self.session.add(LogPartition(name=name, range_start=start, range_end=end))
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            # lost the race to another creator: fine as long as the row is there now
            if self.session.get(LogPartition, name) is None:
                raise self._fail(f"partition create {name}", e) from e
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(f"partition create {name}", e) from e

    def list_partitions(self) -> list[str]:
        try:
            if self.is_postgres:
                names = self.session.execute(PG_LIST_PARTITIONS, {"parent": "logs"}).scalars().all()
            else:
                names = self.session.execute(
                    select(LogPartition.name).order_by(LogPartition.name)
                ).scalars().all()
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("partition listing", e) from e
        return list(names)
