"""
Custom exception classes for the relay.

None of these are ever surfaced to a peer as an error envelope. They exist
so the transport and broadcaster can tell expected per-message and
per-recipient failures apart from programming errors.
"""


class RelayError(Exception):
    """Base class for relay errors."""

    pass


class MalformedEnvelopeError(RelayError):
    """
    Inbound message could not be decoded.

    Raised when the body is not valid JSON, or when it names a known
    envelope type but its fields fail validation.
    """

    pass


class ChannelError(RelayError):
    """
    Outbound channel rejected a message.

    Raised by a connection's send buffer. The broadcaster catches it per
    recipient so one failing connection never aborts a fan-out.
    """

    pass


class ChannelClosedError(ChannelError):
    """The channel is closed or its socket is no longer connected."""

    pass


class SendBufferFullError(ChannelError):
    """The channel's bounded send buffer is full; the message was dropped."""

    pass
