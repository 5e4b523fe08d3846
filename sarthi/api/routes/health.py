"""Health and status routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from sarthi.api.schemas import StatusResponse

router = APIRouter(tags=["system"])


@router.get("/health")
async def health() -> dict:
    """Simple liveness check."""
    return {"status": "ok"}


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    """Engine and backend-connection state."""
    return StatusResponse(**request.app.state.engine.status())
