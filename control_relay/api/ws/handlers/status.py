from control_relay.api.ws.constants import MessageType
from control_relay.logging import logger
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.routing import envelope_handlers
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.request import ClientStatusEnvelope


@envelope_handlers.register(MessageType.CLIENT_STATUS)
def update_client_status(
    registry: ConnectionRegistry,
    session: ConnectionSession,
    envelope: ClientStatusEnvelope,
) -> None:
    if not session.client_id:
        logger.debug(
            f"Ignoring client_status from connection {session.connection_id} "
            f"that never registered as a client"
        )
        return

    registry.update_client_status(
        session.client_id,
        status=envelope.status,
        activity=envelope.activity,
        login_count=envelope.login_count,
        active_account=envelope.active_account,
        channel=session.channel,
    )
