"""
Protocol for envelope codecs.

Defines the interface for turning wire frames into typed envelopes and back,
using structural subtyping (Protocol). Any class implementing these methods
is compatible without explicit inheritance.
"""

from typing import Protocol

from control_relay.schemas.request import InboundEnvelope
from control_relay.schemas.response import OutboundEnvelopeModel


class EnvelopeCodec(Protocol):
    """
    Protocol for envelope encoding and decoding.

    Example:
        ```python
        from control_relay.api.ws.formats import JSONEnvelopeCodec

        codec = JSONEnvelopeCodec()
        envelope = codec.decode('{"type": "heartbeat"}')
        text = codec.encode(WelcomeEvent(message="hi", timestamp=0))
        ```
    """

    def decode(self, raw_data: str | bytes) -> InboundEnvelope | None:
        """
        Convert a raw frame to an inbound envelope.

        Args:
            raw_data: Text or binary frame as received.

        Returns:
            The typed envelope, or None when the frame carries no known
            envelope type and should be ignored.

        Raises:
            MalformedEnvelopeError: If the frame cannot be parsed, or names a
                known type but its fields are invalid.
        """
        ...

    def encode(self, envelope: OutboundEnvelopeModel) -> str:
        """Convert an outbound envelope to its wire text."""
        ...

    @property
    def format_name(self) -> str:
        """Human-readable format name for logging (e.g., 'json')."""
        ...
