import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from control_relay.api.ws.channel import SendChannel
from control_relay.api.ws.constants import Role
from control_relay.constants import CLIENT_STATUS_IDLE
from control_relay.schemas.response import ClientSummary


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


class ConnectionRecord(BaseModel):
    """
    One registered connection, bound to exactly one role.

    Attributes:
        id: Unique within its role's namespace.
        role: Fixed at registration.
        channel: Send handle, owned by this record only.
        connected_at: Registration time (UTC).
        last_heartbeat: Epoch milliseconds of the last heartbeat.
        status: Client-reported status ("connected" until the first report).
        last_activity: Client-reported activity.
        login_count: Client-reported login counter.
        active_account: Client-reported active account.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    role: Role = Field(frozen=True)
    channel: SendChannel = Field(exclude=True, repr=False)
    connected_at: datetime = Field(default_factory=utc_now)
    last_heartbeat: int = Field(default_factory=epoch_ms)
    status: Any = None
    last_activity: Any = None
    login_count: Any = None
    active_account: Any = None

    def summary(self) -> ClientSummary:
        """Snapshot entry used in clients_list."""
        return ClientSummary(
            id=self.id,
            connected_at=self.connected_at,
            last_heartbeat=self.last_heartbeat,
            status=self.status or CLIENT_STATUS_IDLE,
        )


class ConnectionSession(BaseModel):
    """
    What a single socket has registered as.

    A socket may register as a master, a client, or both; the transport
    keeps this binding so heartbeats and disconnects reach the right
    records.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    connection_id: str
    channel: SendChannel = Field(exclude=True, repr=False)
    master_id: str | None = None
    client_id: str | None = None

    def bound_ids(self) -> list[tuple[str, Role]]:
        bound: list[tuple[str, Role]] = []
        if self.master_id:
            bound.append((self.master_id, Role.MASTER))
        if self.client_id:
            bound.append((self.client_id, Role.CLIENT))
        return bound
