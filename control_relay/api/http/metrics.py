"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics() -> Response:
    """
    Expose relay metrics in the Prometheus text exposition format.

    Example:
        ```
        # HELP relay_registered_connections Number of registered connections
        # TYPE relay_registered_connections gauge
        relay_registered_connections{role="client"} 12.0
        ```
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
