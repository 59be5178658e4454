import json
import logging
import os
import secrets

from ..schemas.config_schema import ApiKeyEntry, SloggerConfig
from .auth_service import hash_key

log = logging.getLogger(__name__)


class ConfigStore:
    """
    Reads and writes config.json. Every read goes to disk, nothing is cached.
    """

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def read(self) -> SloggerConfig:
        if not self.exists():
            return SloggerConfig()
        with open(self.path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        return SloggerConfig.model_validate(raw)

    def write(self, config: SloggerConfig) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(json.dumps(config.model_dump(), indent=2) + "\n")

    def ensure(self) -> bool:
        """Create the default config if missing. True when a file was written."""
        if self.exists():
            return False
        self.write(SloggerConfig())
        log.info("CONFIG created path=%s", self.path)
        return True

    def add_api_key(self, name: str = "default") -> str:
        """Append a new key and return the raw secret; only its hash is stored."""
        config = self.read()
        raw_key = secrets.token_hex(32)
        config.api_keys.append(ApiKeyEntry(name=name, hash=hash_key(raw_key)))
        self.write(config)
        log.info("CONFIG api key added name=%s total=%s", name, len(config.api_keys))
        return raw_key
