"""API request/response schemas (Pydantic)."""

from lifeline.schemas.health import HealthResponse
from lifeline.schemas.snapshot import DownloadUrlResponse

__all__ = ["DownloadUrlResponse", "HealthResponse"]
