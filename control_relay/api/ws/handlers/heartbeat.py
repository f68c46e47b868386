from control_relay.api.ws.constants import MessageType
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.managers.heartbeat import handle_heartbeat
from control_relay.routing import envelope_handlers
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.request import HeartbeatEnvelope


@envelope_handlers.register(MessageType.HEARTBEAT)
def heartbeat(
    registry: ConnectionRegistry,
    session: ConnectionSession,
    envelope: HeartbeatEnvelope,
) -> None:
    handle_heartbeat(registry, session)
