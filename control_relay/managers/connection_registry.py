import uuid
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from control_relay.api.ws.channel import SendChannel
from control_relay.api.ws.constants import Role
from control_relay.constants import (
    CLIENT_ID_PREFIX,
    CLIENT_STATUS_CONNECTED,
    GENERATED_ID_SUFFIX_LENGTH,
    MASTER_ID_PREFIX,
)
from control_relay.logging import logger
from control_relay.managers.broadcaster import Broadcaster, BroadcastResult
from control_relay.schemas.connection import ConnectionRecord, epoch_ms
from control_relay.schemas.response import (
    ClientConnectedEvent,
    ClientDisconnectedEvent,
    ClientsListEvent,
    ClientStatusUpdateEvent,
    ClientSummary,
    OutboundEnvelopeModel,
    RegistrationSuccessEvent,
)
from control_relay.utils.metrics import MetricsCollector


def generate_peer_id(prefix: str) -> str:
    """
    Synthesize an id for a peer that registered without one.

    Millisecond timestamp plus a random suffix, so two registrations in the
    same millisecond still get distinct ids.

    Example:
        >>> generate_peer_id("client")
        'client_1760812345678_9f1c2ab0'
    """
    suffix = uuid.uuid4().hex[:GENERATED_ID_SUFFIX_LENGTH]
    return f"{prefix}_{epoch_ms()}_{suffix}"


class ConnectionRegistry:
    """
    Registry of live master and client connections.

    Holds one mapping per role (id -> ConnectionRecord) and is the only
    owner of the records. Every lifecycle change that peers must hear about
    (registration, status update, disconnect) is fanned out from here
    through the broadcaster, in the same call as the mutation.

    The registry does no locking of its own; callers serialize access
    (see MessageRouter).
    """

    def __init__(self, broadcaster: Broadcaster | None = None) -> None:
        self.broadcaster = broadcaster or Broadcaster()
        self._masters: dict[str, ConnectionRecord] = {}
        self._clients: dict[str, ConnectionRecord] = {}

    @property
    def masters(self) -> Mapping[str, ConnectionRecord]:
        """Read-only view of registered masters."""
        return MappingProxyType(self._masters)

    @property
    def clients(self) -> Mapping[str, ConnectionRecord]:
        """Read-only view of registered clients."""
        return MappingProxyType(self._clients)

    @property
    def master_count(self) -> int:
        return len(self._masters)

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def _records(self, role: Role) -> dict[str, ConnectionRecord]:
        return self._masters if role == Role.MASTER else self._clients

    def _insert(self, record: ConnectionRecord) -> None:
        records = self._records(record.role)
        previous = records.get(record.id)
        if previous is not None and previous.channel is not record.channel:
            # The previous connection stays open but is no longer tracked
            logger.warning(
                f"{record.role.capitalize()} {record.id} re-registered from "
                f"another connection; replacing the previous record"
            )
        records[record.id] = record
        self._publish_sizes()

    def _owned_record(
        self, peer_id: str, role: Role, channel: SendChannel | None
    ) -> ConnectionRecord | None:
        """
        The record for ``peer_id``, or None if there is none.

        When ``channel`` is given, a record that a newer registration took
        over from that channel also yields None.
        """
        record = self._records(role).get(peer_id)
        if record is None:
            return None
        if channel is not None and record.channel is not channel:
            logger.debug(
                f"{role.capitalize()} {peer_id} belongs to a newer connection; "
                f"ignoring the superseded one"
            )
            return None
        return record

    def _publish_sizes(self) -> None:
        MetricsCollector.set_registered_connections(
            masters=self.master_count, clients=self.client_count
        )

    def broadcast_to_masters(
        self, envelope: OutboundEnvelopeModel
    ) -> BroadcastResult:
        return self.broadcaster.broadcast(self._masters, envelope)

    def broadcast_to_clients(
        self, envelope: OutboundEnvelopeModel
    ) -> BroadcastResult:
        return self.broadcaster.broadcast(self._clients, envelope)

    def register_master(
        self, master_id: str | None, channel: SendChannel
    ) -> str:
        """
        Register a master connection.

        Sends the new master a snapshot of the registered clients, then the
        registration confirmation.

        Args:
            master_id: Id requested by the master; generated if empty.
            channel: Channel of the registering connection.

        Returns:
            The id the master is registered under.
        """
        master_id = master_id or generate_peer_id(MASTER_ID_PREFIX)
        record = ConnectionRecord(id=master_id, role=Role.MASTER, channel=channel)
        self._insert(record)
        logger.info(f"Master registered: {master_id}")

        self.broadcaster.send_to(
            record, ClientsListEvent(clients=self.list_clients())
        )
        self.broadcaster.send_to(
            record,
            RegistrationSuccessEvent(role=Role.MASTER, master_id=master_id),
        )
        return master_id

    def register_client(
        self, client_id: str | None, channel: SendChannel
    ) -> str:
        """
        Register a client connection.

        Announces the client to every master with client_connected, then
        confirms the registration to the client.

        Args:
            client_id: Id requested by the client; generated if empty.
            channel: Channel of the registering connection.

        Returns:
            The id the client is registered under.
        """
        client_id = client_id or generate_peer_id(CLIENT_ID_PREFIX)
        record = ConnectionRecord(
            id=client_id,
            role=Role.CLIENT,
            channel=channel,
            status=CLIENT_STATUS_CONNECTED,
        )
        self._insert(record)
        logger.info(f"Client registered: {client_id}")

        self.broadcast_to_masters(
            ClientConnectedEvent(
                client=ClientSummary(
                    id=client_id,
                    connected_at=record.connected_at,
                    status=CLIENT_STATUS_CONNECTED,
                )
            )
        )
        self.broadcaster.send_to(
            record,
            RegistrationSuccessEvent(role=Role.CLIENT, client_id=client_id),
        )
        return client_id

    def update_client_status(
        self,
        client_id: str,
        status: Any = None,
        activity: Any = None,
        login_count: Any = None,
        active_account: Any = None,
        channel: SendChannel | None = None,
    ) -> bool:
        """
        Store a client's reported status and relay it to every master.

        Args:
            channel: If given, only update the record when it still belongs
                to this channel.

        Returns:
            False if the client is not registered, or is registered from
            another channel (nothing happens).
        """
        record = self._owned_record(client_id, Role.CLIENT, channel)
        if record is None:
            return False

        record.status = status
        record.last_activity = activity
        record.login_count = login_count
        record.active_account = active_account

        self.broadcast_to_masters(
            ClientStatusUpdateEvent(
                client_id=client_id,
                status=status,
                activity=activity,
                login_count=login_count,
                active_account=active_account,
            )
        )
        return True

    def touch_heartbeat(
        self, peer_id: str, role: Role, channel: SendChannel | None = None
    ) -> bool:
        """
        Set last_heartbeat to now.

        Returns False if the id is unknown, or (when ``channel`` is given)
        now belongs to another channel.
        """
        record = self._owned_record(peer_id, role, channel)
        if record is None:
            return False
        record.last_heartbeat = epoch_ms()
        return True

    def unregister(
        self,
        peer_id: str,
        role: Role,
        channel: SendChannel | None = None,
    ) -> ConnectionRecord | None:
        """
        Remove a record; for clients, tell every master.

        Args:
            peer_id: Id of the record to remove.
            role: Role mapping to remove it from.
            channel: If given, only remove the record when it still belongs
                to this channel. A connection whose id was taken over by a
                newer registration must not remove its successor.

        Returns:
            The removed record, or None if nothing was removed.
        """
        record = self._owned_record(peer_id, role, channel)
        if record is None:
            return None

        del self._records(role)[peer_id]
        self._publish_sizes()
        logger.info(f"{role.capitalize()} disconnected: {peer_id}")

        if role == Role.CLIENT:
            self.broadcast_to_masters(ClientDisconnectedEvent(client_id=peer_id))
        return record

    def list_clients(self) -> list[ClientSummary]:
        """Point-in-time snapshot of registered clients."""
        return [record.summary() for record in self._clients.values()]
