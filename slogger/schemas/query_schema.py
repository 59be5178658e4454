import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..services.time_extraction import to_datetime

DEFAULT_LIMIT = 1000
MAX_LIMIT = 1000
# largest value LIMIT/OFFSET can bind as (bigint / sqlite INTEGER)
MAX_SQL_INT = 2 ** 63 - 1


def _to_number(value: Any) -> int | float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        n = float(value) if isinstance(value, float) else float(str(value).strip())
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def parse_limit(value: Any, max_limit: int | None = MAX_LIMIT) -> int:
    """
    Non-numeric or <= 0 -> default; result within [1, max_limit].
    max_limit=None leaves the ceiling to the caller (QueryService).
    """
    n = _to_number(value)
    if n is None or n <= 0:
        n = DEFAULT_LIMIT
    ceiling = MAX_SQL_INT if max_limit is None else max_limit
    return max(1, min(int(n), ceiling))


def parse_offset(value: Any) -> int:
    n = _to_number(value)
    if n is None or n < 0:
        return 0
    return min(int(n), MAX_SQL_INT)


def parse_date(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return to_datetime(value.isoformat())
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return to_datetime(value)
    return None


def parse_sources(value: Any) -> List[str] | None:
    """"a, b" or ["a", " b "] -> ["a", "b"]; nothing left -> None (no restriction)."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    cleaned = [str(v).strip() for v in value if v is not None]
    cleaned = [v for v in cleaned if v]
    return cleaned or None


def _clean_text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


class LogFilter(BaseModel):
    """
    Query filter. Parsing is permissive: malformed bounds become "no bound",
    bad limit/offset fall back to defaults. Every field is optional and the
    present ones are combined with AND.
    """
    model_config = ConfigDict(populate_by_name=True)

    sources: Optional[List[str]] = None
    search: Optional[str] = None
    path: Optional[str] = Field(None, description="a.b.c or a.b.c=value")
    from_: Optional[datetime] = Field(None, alias="from")
    to: Optional[datetime] = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @field_validator("sources", mode="before")
    @classmethod
    def _sources(cls, v):
        return parse_sources(v)

    @field_validator("search", "path", mode="before")
    @classmethod
    def _text(cls, v):
        return _clean_text(v)

    @field_validator("from_", "to", mode="before")
    @classmethod
    def _bounds(cls, v):
        return parse_date(v)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, v):
        return parse_limit(v, max_limit=None)

    @field_validator("offset", mode="before")
    @classmethod
    def _offset(cls, v):
        return parse_offset(v)

    @classmethod
    def from_args(cls, args) -> "LogFilter":
        """Build from request.args (MultiDict) or any mapping."""
        return cls.model_validate({
            "sources": args.get("sources"),
            "search": args.get("search"),
            "path": args.get("path") or args.get("json_path"),
            "from": args.get("from"),
            "to": args.get("to"),
            "limit": args.get("limit"),
            "offset": args.get("offset"),
        })
