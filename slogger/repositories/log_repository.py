import re

from sqlalchemy import Text, cast, false, func, literal_column, or_, select
from sqlalchemy.exc import SQLAlchemyError

from ..models import LogEntry
from .base_repository import BaseRepository

TOKEN_RE = re.compile(r"\w+", re.UNICODE)

LOG_COLUMNS = (LogEntry.id, LogEntry.source, LogEntry.props, LogEntry.time, LogEntry.created_at)


def search_tokens(search: str) -> list[str]:
    return TOKEN_RE.findall(search or "")


class LogRepository(BaseRepository):

    def insert_entries(self, rows: list[dict]) -> int:
        """
        All-or-nothing bulk insert of {source, props, time} dicts.
        On failure nothing is committed and StorageError is raised.
        """
        if not rows:
            return 0
        try:
            self._begin()
            self.session.execute(LogEntry.__table__.insert(), rows)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("bulk insert", e) from e
        return len(rows)

    # -------- filters --------

    def search_clause(self, search: str):
        tokens = search_tokens(search)
        if not tokens:
            return false()

        if self.is_postgres:
            # any token: "a or b" in websearch syntax; 'simple' = no stemming, no stop words
            config = literal_column("'simple'")
            document = func.to_tsvector(config, LogEntry.props)
            query = func.websearch_to_tsquery(config, " or ".join(tokens))
            return document.bool_op("@@")(query)

        # whole words of the JSON text; a word right before '":' is a key, not a value
        padded = " " + func.lower(cast(LogEntry.props, Text), type_=Text) + " "
        clauses = []
        for t in tokens:
            word = t.lower()
            clauses.append(padded.op("GLOB")(f"*[^a-z0-9_]{word}[^a-z0-9_\"]*"))
            clauses.append(padded.op("GLOB")(f"*[^a-z0-9_]{word}\"[^:]*"))
        return or_(*clauses)

    def path_clause(self, expr: str):
        """
        "meta.level"        -> value at path exists and is not null
        "meta.level=error"  -> value at path, as text, equals "error"
        """
        path, sep, value = expr.partition("=")
        keys = tuple(k.strip() for k in path.split(".") if k.strip())
        if not keys:
            return false()

        target = cast(LogEntry.props[keys].as_string(), Text)
        if not sep:
            return target.isnot(None)
        return target == value.strip()

    def filter_clauses(self, criteria) -> list:
        """Predicates shared by the page query and the count query."""
        clauses = []
        if criteria.sources:
            clauses.append(LogEntry.source.in_(criteria.sources))
        if criteria.search:
            clauses.append(self.search_clause(criteria.search))
        if criteria.path:
            clauses.append(self.path_clause(criteria.path))
        if criteria.from_:
            clauses.append(LogEntry.time >= criteria.from_)
        if criteria.to:
            clauses.append(LogEntry.time <= criteria.to)
        return clauses

    # -------- reads --------

    def page_statement(self, criteria, limit: int, offset: int):
        return (
            select(*LOG_COLUMNS)
            .where(*self.filter_clauses(criteria))
            .order_by(LogEntry.time.desc(), LogEntry.id.desc())
            .limit(limit)
            .offset(offset)
        )

    def count_statement(self, criteria):
        return select(func.count()).select_from(LogEntry).where(*self.filter_clauses(criteria))

    def find_page(self, criteria, limit: int, offset: int):
        """Returns (rows, total); both read in one snapshot."""
        try:
            self._begin(isolation_level="REPEATABLE READ")
            rows = self.session.execute(self.page_statement(criteria, limit, offset)).all()
            total = self.session.execute(self.count_statement(criteria)).scalar_one()
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("log query", e) from e
        return rows, int(total)

    def distinct_sources(self) -> list[str]:
        stmt = select(LogEntry.source).distinct().order_by(LogEntry.source.asc())
        try:
            self._begin()
            sources = self.session.execute(stmt).scalars().all()
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("source listing", e) from e
        return list(sources)
