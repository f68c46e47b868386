"""JSON envelope codec."""

import json

from pydantic import TypeAdapter, ValidationError

from control_relay.api.ws.constants import MessageType
from control_relay.exceptions import MalformedEnvelopeError
from control_relay.schemas.request import InboundEnvelope
from control_relay.schemas.response import OutboundEnvelopeModel

_KNOWN_TYPES = frozenset(member.value for member in MessageType)

_envelope_adapter: TypeAdapter[InboundEnvelope] = TypeAdapter(InboundEnvelope)


class JSONEnvelopeCodec:
    """
    JSON envelope codec (the only format masters and clients speak).

    Frames that parse but do not carry a known ``type`` (including
    non-object JSON) decode to None so the router can ignore them without
    logging noise. Only unparseable frames and invalid fields on a known
    type are errors.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def decode(self, raw_data: str | bytes) -> InboundEnvelope | None:
        try:
            payload = json.loads(raw_data)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise MalformedEnvelopeError(f"Invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            return None

        envelope_type = payload.get("type")
        if not isinstance(envelope_type, str) or envelope_type not in _KNOWN_TYPES:
            return None

        try:
            return _envelope_adapter.validate_python(payload)
        except ValidationError as e:
            raise MalformedEnvelopeError(
                f"Invalid {envelope_type} envelope: {e.error_count()} error(s)"
            ) from e

    def encode(self, envelope: OutboundEnvelopeModel) -> str:
        return envelope.model_dump_json(by_alias=True, exclude_none=True)
