"""
Envelopes sent by masters and clients.

InboundEnvelope is a closed tagged union on ``type``. Unknown types never
reach it; the codec filters them out before validation.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def is_absent(value: Any) -> bool:
    """
    Whether a peer-supplied value counts as not given.

    Peers treat null, false, 0, NaN and the empty string as "no value", so
    all of them are absent here too. Empty lists and objects are values.
    """
    if isinstance(value, (bool, int, float)):
        return not value or value != value
    return value is None or value == ""


class InboundEnvelopeModel(BaseModel):
    """
    Base model for inbound envelopes.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    fields are ignored and numeric ids are accepted as strings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
        frozen=True,
    )


class RegisterMasterEnvelope(InboundEnvelopeModel):
    type: Literal["register_master"]
    master_id: str | None = None

    @field_validator("master_id", mode="before")
    @classmethod
    def absent_id_to_none(cls, value: Any) -> Any:
        return None if is_absent(value) else value


class RegisterClientEnvelope(InboundEnvelopeModel):
    type: Literal["register_client"]
    client_id: str | None = None

    @field_validator("client_id", mode="before")
    @classmethod
    def absent_id_to_none(cls, value: Any) -> Any:
        return None if is_absent(value) else value


class MasterCommandEnvelope(InboundEnvelopeModel):
    """
    Command issued by a master.

    Attributes:
        command: Command name, see MasterCommand. Unknown names are ignored
            by the router, not rejected here.
        data: Opaque payload relayed to clients as-is, or as {} when
            absent (see is_absent).
    """

    type: Literal["master_command"]
    command: str
    data: Any = None


class ClientStatusEnvelope(InboundEnvelopeModel):
    """Status report from a client. All fields are relayed verbatim."""

    type: Literal["client_status"]
    status: Any = None
    activity: Any = None
    login_count: Any = None
    active_account: Any = None


class HeartbeatEnvelope(InboundEnvelopeModel):
    type: Literal["heartbeat"]


InboundEnvelope = Annotated[
    Union[
        RegisterMasterEnvelope,
        RegisterClientEnvelope,
        MasterCommandEnvelope,
        ClientStatusEnvelope,
        HeartbeatEnvelope,
    ],
    Field(discriminator="type"),
]
