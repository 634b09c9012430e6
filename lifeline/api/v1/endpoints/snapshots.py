"""Snapshot download endpoint: exchange an owned object path for a signed URL."""

from typing import Annotated

from fastapi import APIRouter, Depends

from lifeline.api.v1.dependencies import get_current_requester, get_signed_access_gateway
from lifeline.application.services.signed_access import SignedAccessGateway
from lifeline.schemas.snapshot import DownloadUrlResponse

router = APIRouter()


@router.get(
    "/{path:path}/download",
    response_model=DownloadUrlResponse,
    responses={
        401: {"description": "Missing or invalid bearer token"},
        403: {"description": "Path outside the requester's prefix"},
        404: {"description": "Object not found"},
    },
)
async def get_download_url(
    path: str,
    requester_id: Annotated[str, Depends(get_current_requester)],
    gateway: Annotated[SignedAccessGateway, Depends(get_signed_access_gateway)],
) -> DownloadUrlResponse:
    """Return a 10-minute signed URL for one of the requester's snapshot objects."""
    url = await gateway.issue_download_url(requester_id, path)
    return DownloadUrlResponse(url=url)
