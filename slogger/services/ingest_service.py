import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from ..errors import IngestValidationError
from ..schemas.ingest_schema import IngestPayload
from .normalize_service import normalize_props
from .partition_manager import utc_day
from .time_extraction import extract_time

log = logging.getLogger(__name__)


class IngestService:
    def __init__(self, repository, partitions, config_store, clock=None):
        self.repository = repository
        self.partitions = partitions
        self.config_store = config_store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _validate(self, source, payload) -> list:
        if not isinstance(source, str) or not source.strip():
            raise IngestValidationError("source is required")
        try:
            return IngestPayload.model_validate(payload).root
        except ValidationError:
            raise IngestValidationError("body must be a json array") from None

    def build_rows(self, source: str, entries: list, time_paths: list[str]) -> list[dict]:
        now = self._clock()
        rows = []
        for entry in entries:
            props = normalize_props(entry)
            rows.append({
                "source": source,
                "props": props,
                "time": extract_time(props, time_paths) or now,
            })
        return rows

    def ingest(self, source: str, payload) -> dict:
        """
        1) payload must be a json array (empty is fine)
        2) normalize + event time per element
        3) ensure one partition per distinct UTC day, all before the insert
        4) single all-or-nothing bulk insert
        """
        entries = self._validate(source, payload)
        config = self.config_store.read()
        rows = self.build_rows(source, entries, config.time_paths)

        days = sorted({utc_day(row["time"]) for row in rows})
        for day in days:
            self.partitions.ensure_partition_for_date(day)

        inserted = self.repository.insert_entries(rows)
        log.info("INGEST inserted=%s source=%s days=%s", inserted, source, len(days))
        return {"inserted": inserted}
