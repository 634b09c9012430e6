"""API v1 router aggregation."""

from fastapi import APIRouter

from lifeline.api.v1.endpoints import health, snapshots

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(snapshots.router, prefix="/snapshots", tags=["snapshots"])
