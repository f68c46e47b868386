"""
Relay of master commands to clients.

Commands are content-agnostic: ``data`` is forwarded untouched, or as ``{}``
when absent (null, false, 0 or an empty string). The relay only decides
which wire name clients see and whether the command carries data at all.
"""

from control_relay.api.ws.constants import ClientCommand, MasterCommand, MessageType
from control_relay.logging import logger
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.routing import envelope_handlers
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.request import MasterCommandEnvelope, is_absent
from control_relay.schemas.response import CommandEvent
from control_relay.utils.metrics import MetricsCollector

# MasterCommand -> (command name sent to clients, whether data is relayed)
COMMAND_RELAY_TABLE: dict[MasterCommand, tuple[ClientCommand, bool]] = {
    MasterCommand.SWITCH_ACCOUNT: (ClientCommand.SWITCH_ACCOUNT, True),
    MasterCommand.PERFORM_LOGIN: (ClientCommand.LOGIN, True),
    MasterCommand.GET_CLIENT_STATUS: (ClientCommand.STATUS, False),
    MasterCommand.CLEAR_CACHE: (ClientCommand.CLEAR_CACHE, True),
}


def build_command_event(envelope: MasterCommandEnvelope) -> CommandEvent | None:
    """
    Translate a master_command envelope into the command clients receive.

    Returns:
        The CommandEvent, or None for a command the relay does not know.
    """
    try:
        command = MasterCommand(envelope.command)
    except ValueError:
        return None

    client_command, relays_data = COMMAND_RELAY_TABLE[command]
    if not relays_data:
        return CommandEvent(command=client_command)

    data = {} if is_absent(envelope.data) else envelope.data
    return CommandEvent(command=client_command, data=data)


@envelope_handlers.register(MessageType.MASTER_COMMAND)
def relay_master_command(
    registry: ConnectionRegistry,
    session: ConnectionSession,
    envelope: MasterCommandEnvelope,
) -> None:
    event = build_command_event(envelope)
    if event is None:
        logger.debug(f"Ignoring unknown master command {envelope.command!r}")
        return

    logger.info(
        f"Broadcasting {event.command} command to {registry.client_count} clients"
    )
    result = registry.broadcast_to_clients(event)
    MetricsCollector.record_command_relayed(event.command)

    for client_id in result.delivered:
        logger.debug(f"Command {event.command} sent to client {client_id}")
