import logging

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from ..errors import StorageError, StorageTimeoutError

log = logging.getLogger(__name__)

PG_QUERY_CANCELED = "57014"


class BaseRepository:
    """
    Shared plumbing for repositories: dialect checks, per-transaction
    statement timeout and SQLAlchemy -> StorageError translation.

    `session` is any SQLAlchemy Session (Flask-SQLAlchemy's scoped session in
    the app, a plain Session in tests).
    """

    def __init__(self, session, statement_timeout_ms: int | None = None):
        self.session = session
        self.statement_timeout_ms = statement_timeout_ms

    @property
    def dialect(self) -> str:
        return self.session.get_bind().dialect.name

    @property
    def is_postgres(self) -> bool:
        return self.dialect == "postgresql"

    def _begin(self, isolation_level: str | None = None) -> None:
        if not self.is_postgres:
            return
        if isolation_level and not self.session.in_transaction():
            self.session.connection(execution_options={"isolation_level": isolation_level})
        if self.statement_timeout_ms:
            # SET LOCAL does not take bind params; set_config(..., true) is the same thing
            self.session.execute(
                text("SELECT set_config('statement_timeout', :ms, true)"),
                {"ms": str(int(self.statement_timeout_ms))},
            )

    def _fail(self, what: str, exc: SQLAlchemyError) -> StorageError:
        self.session.rollback()
        orig = getattr(exc, "orig", None)
        if isinstance(exc, OperationalError) and getattr(orig, "pgcode", None) == PG_QUERY_CANCELED:
            log.warning("STORAGE timeout during %s", what)
            return StorageTimeoutError(f"{what} timed out", exc)
        log.error("STORAGE %s failed: %s", what, exc)
        return StorageError(f"{what} failed", exc)
