from typing import Annotated, List

from pydantic import BaseModel, Field

from ..services.time_extraction import DEFAULT_TIME_PATHS

TimePath = Annotated[str, Field(min_length=1)]


class ApiKeyEntry(BaseModel):
    name: str = Field(..., min_length=1, description="display label, not unique")
    hash: str = Field(..., pattern=r"^[a-fA-F0-9]{64}$", description="sha256 hex of the raw key")


class SloggerConfig(BaseModel):
    api_keys: List[ApiKeyEntry] = Field(default_factory=list)
    time_paths: List[TimePath] = Field(default_factory=lambda: list(DEFAULT_TIME_PATHS))

    def key_hashes(self) -> List[str]:
        return [k.hash.lower() for k in self.api_keys]
