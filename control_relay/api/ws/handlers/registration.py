"""
Handlers binding a connection to the master or client role.

A connection may register as both roles. Registering again in the same role
under a different id releases the id it held before, so one socket never
leaves an orphaned record behind.
"""

from control_relay.api.ws.constants import MessageType, Role
from control_relay.logging import set_log_context
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.routing import envelope_handlers
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.request import (
    RegisterClientEnvelope,
    RegisterMasterEnvelope,
)


@envelope_handlers.register(MessageType.REGISTER_MASTER)
def register_master(
    registry: ConnectionRegistry,
    session: ConnectionSession,
    envelope: RegisterMasterEnvelope,
) -> None:
    previous_id = session.master_id
    master_id = registry.register_master(envelope.master_id, session.channel)
    session.master_id = master_id
    set_log_context(master_id=master_id)

    if previous_id and previous_id != master_id:
        registry.unregister(previous_id, Role.MASTER, channel=session.channel)


@envelope_handlers.register(MessageType.REGISTER_CLIENT)
def register_client(
    registry: ConnectionRegistry,
    session: ConnectionSession,
    envelope: RegisterClientEnvelope,
) -> None:
    previous_id = session.client_id
    client_id = registry.register_client(envelope.client_id, session.channel)
    session.client_id = client_id
    set_log_context(client_id=client_id)

    if previous_id and previous_id != client_id:
        registry.unregister(previous_id, Role.CLIENT, channel=session.channel)
