import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from slogger import create_app
from slogger.repositories.log_repository import LogRepository
from slogger.repositories.partition_repository import PartitionRepository
from slogger.services.auth_service import hash_key
from slogger.services.config_store import ConfigStore
from slogger.services.ingest_service import IngestService
from slogger.services.partition_manager import PartitionManager
from slogger.services.query_service import QueryService

from .fakes import FIXED_NOW, RAW_KEY


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "api_keys": [{"name": "tests", "hash": hash_key(RAW_KEY)}],
        "time_paths": ["timestamp", "time", "created_at", "meta.time"],
    }))
    return str(path)


@pytest.fixture
def config_store(config_path):
    return ConfigStore(config_path)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    Session = sessionmaker(bind=engine)
    s = Session()
    PartitionRepository(s).ensure_storage()
    yield s
    s.close()


@pytest.fixture
def partition_repository(session):
    return PartitionRepository(session)


@pytest.fixture
def log_repository(session):
    return LogRepository(session)


@pytest.fixture
def partitions(partition_repository):
    return PartitionManager(partition_repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def ingest_service(log_repository, partitions, config_store):
    return IngestService(log_repository, partitions, config_store, clock=lambda: FIXED_NOW)


@pytest.fixture
def query_service(log_repository):
    return QueryService(log_repository)


@pytest.fixture
def app(config_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SCHEDULER_ENABLED": False,
        "CONFIG_PATH": config_path,
        "STATEMENT_TIMEOUT_MS": 0,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {RAW_KEY}"}
