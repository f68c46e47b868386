"""Envelope codecs."""

from control_relay.api.ws.formats.json import JSONEnvelopeCodec
from control_relay.api.ws.formats.protocol import EnvelopeCodec

__all__ = [
    "EnvelopeCodec",
    "JSONEnvelopeCodec",
]
