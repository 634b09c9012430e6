"""Snapshot download API schemas."""

from pydantic import BaseModel, Field


class DownloadUrlResponse(BaseModel):
    """Response for GET /snapshots/{path}/download."""

    url: str = Field(..., description="Pre-signed GET URL, valid for 10 minutes")
