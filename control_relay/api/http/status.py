"""Status endpoint reporting registered connection counts."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from control_relay.constants import SERVER_RUNNING_STATUS
from control_relay.routing import MessageRouter

router = APIRouter()


class StatusResponse(BaseModel):
    """Response model for the status endpoint."""

    status: str
    masters: int
    clients: int
    uptime: float
    timestamp: datetime


@router.get(
    "/",
    response_model=StatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Relay status",
    tags=["status"],
)
async def relay_status(request: Request) -> StatusResponse:
    """
    Report how many masters and clients are currently registered.

    Returns:
        StatusResponse: Registered connection counts, process uptime in
        seconds and the current UTC time.
    """
    message_router: MessageRouter = request.app.state.message_router
    started_at: float = request.app.state.started_at

    return StatusResponse(
        status=SERVER_RUNNING_STATUS,
        masters=message_router.registry.master_count,
        clients=message_router.registry.client_count,
        uptime=round(time.monotonic() - started_at, 3),
        timestamp=datetime.now(timezone.utc),
    )
