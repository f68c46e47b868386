"""Envelopes the relay sends to masters and clients."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from control_relay.api.ws.constants import ClientCommand, Role


class OutboundEnvelopeModel(BaseModel):
    """
    Base model for outbound envelopes.

    Serialized with camelCase aliases and without None fields, so optional
    values the peer never set are absent from the JSON, not null.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClientSummary(OutboundEnvelopeModel):
    id: str
    connected_at: datetime
    last_heartbeat: int | None = None
    status: Any = None


class WelcomeEvent(OutboundEnvelopeModel):
    type: Literal["welcome"] = "welcome"
    message: str
    timestamp: int


class RegistrationSuccessEvent(OutboundEnvelopeModel):
    type: Literal["registration_success"] = "registration_success"
    role: Role
    master_id: str | None = None
    client_id: str | None = None


class ClientsListEvent(OutboundEnvelopeModel):
    type: Literal["clients_list"] = "clients_list"
    clients: list[ClientSummary]


class ClientConnectedEvent(OutboundEnvelopeModel):
    type: Literal["client_connected"] = "client_connected"
    client: ClientSummary


class ClientStatusUpdateEvent(OutboundEnvelopeModel):
    type: Literal["client_status_update"] = "client_status_update"
    client_id: str
    status: Any = None
    activity: Any = None
    login_count: Any = None
    active_account: Any = None


class ClientDisconnectedEvent(OutboundEnvelopeModel):
    type: Literal["client_disconnected"] = "client_disconnected"
    client_id: str


class CommandEvent(OutboundEnvelopeModel):
    type: Literal["command"] = "command"
    command: ClientCommand
    data: Any = None
