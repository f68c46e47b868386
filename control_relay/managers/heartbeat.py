"""
Heartbeat tracking.

Heartbeats only refresh last_heartbeat on the records a connection is bound
to and still owns. An id taken over by a newer registration is refreshed by
the new connection only. Nothing here evicts stale connections; records
are removed only when the transport reports the socket closed.
"""

from control_relay.logging import logger
from control_relay.managers.connection_registry import ConnectionRegistry
from control_relay.schemas.connection import ConnectionSession


def handle_heartbeat(
    registry: ConnectionRegistry, session: ConnectionSession
) -> list[str]:
    """
    Refresh last_heartbeat for every id the session is bound to.

    Args:
        registry: Registry holding the session's records.
        session: The connection the heartbeat arrived on.

    Returns:
        Ids whose heartbeat was refreshed. Empty for a connection that never
        registered, or whose ids were all taken over, in which case the
        registry is left untouched.
    """
    touched = [
        peer_id
        for peer_id, role in session.bound_ids()
        if registry.touch_heartbeat(peer_id, role, channel=session.channel)
    ]
    if not touched:
        logger.debug(
            f"Heartbeat from unregistered connection {session.connection_id}"
        )
    return touched
