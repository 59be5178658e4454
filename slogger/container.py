from dataclasses import dataclass

from .repositories.log_repository import LogRepository
from .repositories.partition_repository import PartitionRepository
from .services.config_store import ConfigStore
from .services.ingest_service import IngestService
from .services.partition_manager import PartitionManager
from .services.query_service import QueryService
from .services.scheduler import PartitionMaintenance


@dataclass
class Services:
    config_store: ConfigStore
    partition_repository: PartitionRepository
    log_repository: LogRepository
    partitions: PartitionManager
    ingest: IngestService
    query: QueryService
    maintenance: PartitionMaintenance | None = None


def build_services(session, config) -> Services:
    """Wire repositories and services around one injected SQLAlchemy session."""
    timeout = config.get("STATEMENT_TIMEOUT_MS") or None

    config_store = ConfigStore(config["CONFIG_PATH"])
    partition_repository = PartitionRepository(session, timeout)
    log_repository = LogRepository(session, timeout)
    partitions = PartitionManager(partition_repository)

    return Services(
        config_store=config_store,
        partition_repository=partition_repository,
        log_repository=log_repository,
        partitions=partitions,
        ingest=IngestService(log_repository, partitions, config_store),
        query=QueryService(log_repository, max_limit=config.get("QUERY_MAX_LIMIT", 1000)),
    )
