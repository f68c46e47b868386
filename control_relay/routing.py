import asyncio
import os
import pkgutil
from collections.abc import Callable
from importlib import import_module
from typing import Any

from fastapi import APIRouter

from control_relay.api.ws.constants import MessageType
from control_relay.logging import logger
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.request import InboundEnvelope

EnvelopeHandler = Callable[[ConnectionRegistry, ConnectionSession, Any], None]


class EnvelopeHandlerTable:
    """
    Dispatch table from envelope type to handler.

    Handlers register themselves with the ``register`` decorator when their
    module is imported (see ``control_relay.api.ws.handlers.load_handlers``).
    The table holds code only; all connection state lives in the registry
    passed to each handler.
    """

    def __init__(self) -> None:
        self.handlers_registry: dict[MessageType, EnvelopeHandler] = {}

    def register(self, *message_types: MessageType):
        """
        Decorator registering a handler for one or more envelope types.

        Args:
            *message_types: Envelope types the decorated function handles.

        Raises:
            ValueError: If a different handler is already registered for one
                of the types.
        """

        def decorator(func: EnvelopeHandler) -> EnvelopeHandler:
            for message_type in message_types:
                # Idempotent for module reloads
                if message_type in self.handlers_registry:
                    if self.handlers_registry[message_type] != func:
                        raise ValueError(
                            f"Different handler already registered for {message_type}"
                        )
                    continue

                self.handlers_registry[message_type] = func
                logger.debug(
                    f"Register {func.__module__}.{func.__name__} for {message_type}"
                )

            return func

        return decorator

    def missing(self) -> list[MessageType]:
        """Envelope types without a handler."""
        return [t for t in MessageType if t not in self.handlers_registry]


envelope_handlers = EnvelopeHandlerTable()


class MessageRouter:
    """
    Dispatches decoded envelopes against one ConnectionRegistry.

    Every dispatch and every disconnect runs under a single asyncio.Lock,
    covering both the registry mutation and the fan-out it triggers. Fan-out
    only enqueues on per-connection buffers, so the lock is never held across
    a socket write.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        handlers: EnvelopeHandlerTable = envelope_handlers,
    ) -> None:
        """
        Args:
            registry: Registry to route against; a fresh one if omitted.
            handlers: Handler table; must cover every MessageType.

        Raises:
            RuntimeError: If the handler table is incomplete.
        """
        from control_relay.api.ws.handlers import load_handlers

        load_handlers()

        if missing := handlers.missing():
            raise RuntimeError(
                "No handler registered for envelope types: "
                + ", ".join(missing)
            )

        self.registry = registry or ConnectionRegistry()
        self.handlers = handlers
        self._lock = asyncio.Lock()

    async def dispatch(
        self, session: ConnectionSession, envelope: InboundEnvelope
    ) -> None:
        """
        Run the handler for ``envelope.type`` on behalf of ``session``.

        The sender's claimed role is not verified: any connection may send
        master_command. client_status only requires that the connection
        still owns the client id it registered under.
        """
        handler = self.handlers.handlers_registry[MessageType(envelope.type)]
        async with self._lock:
            handler(self.registry, session, envelope)

    async def disconnect(self, session: ConnectionSession) -> None:
        """Unregister every record the closing connection is bound to."""
        async with self._lock:
            for peer_id, role in session.bound_ids():
                self.registry.unregister(peer_id, role, channel=session.channel)


# Track registered modules to prevent duplicate logging
_registered_http_modules: set[str] = set()
_registered_ws_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Collects all HTTP and WebSocket routers of the application.

    Imports every module in ``api/http`` and ``api/ws/consumers`` and
    includes its ``router`` in the returned main router.
    """
    main_router: APIRouter = APIRouter()

    package_dir = os.path.dirname(__file__)
    package_name = os.path.basename(package_dir)

    for _, module, _ in pkgutil.iter_modules([f"{package_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{package_name}.api.http")
        main_router.include_router(api.router)

        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    for _, module, _ in pkgutil.iter_modules([f"{package_dir}/api/ws/consumers"]):
        ws_consumer = import_module(
            f".{module}", package=f"{package_name}.api.ws.consumers"
        )
        main_router.include_router(ws_consumer.router)

        if module not in _registered_ws_modules:
            logger.info(f'Register "{module}" websocket consumer')
            _registered_ws_modules.add(module)

    return main_router
