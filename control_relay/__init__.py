# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import sys
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from control_relay.logging import logger
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.middlewares.correlation_id import CorrelationIDMiddleware
from control_relay.routing import MessageRouter, collect_subrouters
from control_relay.settings import app_settings

__version__ = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown.

    The relay keeps no state across restarts, so there is nothing to flush:
    connections still open at shutdown are closed by the server.
    """
    from control_relay.utils.metrics import app_info

    app_info.labels(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        environment=app_settings.ENVIRONMENT,
    ).set(1)
    logger.info(
        f"Relay started (WebSocket path {app_settings.WS_PATH!r}, "
        f"send buffer {app_settings.WS_SEND_QUEUE_SIZE} messages)"
    )

    yield

    registry = app.state.message_router.registry
    logger.info(
        f"Relay shutting down with {registry.master_count} masters and "
        f"{registry.client_count} clients registered"
    )


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Each application owns one relay: a MessageRouter and the
    ConnectionRegistry it routes against, stored in
    ``app.state.message_router``. Routers are collected from ``api/http``
    and ``api/ws/consumers``.

    Middlewares (execute in REVERSE order of registration):
    CorrelationIDMiddleware → CORSMiddleware
    """
    app = FastAPI(
        title="Control Relay",
        description="Relays commands from masters to clients and status from clients to masters",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.message_router = MessageRouter(ConnectionRegistry())
    app.state.started_at = time.monotonic()

    app.include_router(collect_subrouters())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
