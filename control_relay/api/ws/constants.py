from enum import StrEnum


class MessageType(StrEnum):
    """
    Discriminator of envelopes sent by masters and clients.

    Every member must have a handler registered on the envelope handler
    table; MessageRouter refuses to start otherwise.

    Attributes:
        REGISTER_MASTER: Bind the connection as a master.
        REGISTER_CLIENT: Bind the connection as a client.
        MASTER_COMMAND: Command to relay to every client.
        CLIENT_STATUS: Status report to relay to every master.
        HEARTBEAT: Liveness signal.
    """

    REGISTER_MASTER = "register_master"
    REGISTER_CLIENT = "register_client"
    MASTER_COMMAND = "master_command"
    CLIENT_STATUS = "client_status"
    HEARTBEAT = "heartbeat"


class Role(StrEnum):
    MASTER = "master"
    CLIENT = "client"


class MasterCommand(StrEnum):
    """Commands a master may send in a master_command envelope."""

    SWITCH_ACCOUNT = "switch_account"
    PERFORM_LOGIN = "perform_login"
    GET_CLIENT_STATUS = "get_client_status"
    CLEAR_CACHE = "clear_cache"


class ClientCommand(StrEnum):
    """
    Command names as clients see them on the wire.

    Note that PERFORM_LOGIN is relayed as "login"; deployed clients depend
    on that name.
    """

    SWITCH_ACCOUNT = "switch_account"
    LOGIN = "login"
    STATUS = "status"
    CLEAR_CACHE = "clear_cache"
