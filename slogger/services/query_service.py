from datetime import datetime, timezone

from ..schemas.query_schema import MAX_LIMIT, LogFilter


def isoformat_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        # sqlite hands back naive values; everything is stored as UTC
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def serialize_row(row) -> dict:
    return {
        "id": str(row.id),
        "source": row.source,
        "props": row.props,
        "time": isoformat_utc(row.time),
        "created_at": isoformat_utc(row.created_at),
    }


class QueryService:
    def __init__(self, repository, max_limit: int = MAX_LIMIT):
        self.repository = repository
        self.max_limit = max(1, max_limit)

    def normalize_filter(self, criteria) -> LogFilter:
        if not isinstance(criteria, LogFilter):
            criteria = LogFilter.model_validate(criteria or {})
        limit = max(1, min(criteria.limit, self.max_limit))
        return criteria.model_copy(update={"limit": limit})

    def query_logs(self, criteria=None) -> dict:
        """
        Page of logs (time desc, newest insert first on ties) plus the exact
        total for the same filter, independent of limit/offset.
        """
        f = self.normalize_filter(criteria)
        rows, total = self.repository.find_page(f, f.limit, f.offset)
        return {"logs": [serialize_row(r) for r in rows], "total": total}

    def query_sources(self) -> list[str]:
        return self.repository.distinct_sources()
