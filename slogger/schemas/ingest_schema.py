from typing import Any, List

from pydantic import RootModel


class IngestPayload(RootModel[List[Any]]):
    """Request body of POST /api/logs/<source>: any JSON array."""
