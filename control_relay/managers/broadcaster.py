from collections.abc import Mapping

from pydantic import BaseModel, Field

from control_relay.api.ws.formats import EnvelopeCodec, JSONEnvelopeCodec
from control_relay.exceptions import ChannelError, SendBufferFullError
from control_relay.logging import logger
from control_relay.schemas.connection import ConnectionRecord
from control_relay.schemas.response import OutboundEnvelopeModel
from control_relay.utils.metrics import MetricsCollector


class BroadcastResult(BaseModel):
    """
    Outcome of a fan-out.

    Attributes:
        delivered: Ids whose channel accepted the envelope.
        failed: Ids that did not, mapped to 'closed', 'buffer_full' or
            'write_error'.
    """

    delivered: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)


class Broadcaster:
    """
    Fan-out of outbound envelopes to connection records.

    Sends are fire-and-forget: the envelope is queued on the recipient's
    channel and failures are logged and counted per recipient, never raised
    to the caller.
    """

    def __init__(self, codec: EnvelopeCodec | None = None) -> None:
        self.codec: EnvelopeCodec = codec or JSONEnvelopeCodec()

    def send_to(
        self, record: ConnectionRecord, envelope: OutboundEnvelopeModel
    ) -> bool:
        """
        Send an envelope to a single connection.

        Returns:
            True if the envelope was queued, False otherwise.
        """
        return self._deliver(record, self.codec.encode(envelope)) is None

    def broadcast(
        self,
        records: Mapping[str, ConnectionRecord],
        envelope: OutboundEnvelopeModel,
    ) -> BroadcastResult:
        """
        Send an envelope to every record of a role mapping.

        Iterates over a snapshot, so the mapping may change while the
        fan-out runs. Order is unspecified.

        Args:
            records: Role mapping (id -> record) to fan out to.
            envelope: Envelope to send; serialized once.

        Returns:
            BroadcastResult listing delivered and failed ids.
        """
        result = BroadcastResult()
        if not records:
            return result

        text = self.codec.encode(envelope)
        for record_id, record in list(records.items()):
            reason = self._deliver(record, text)
            if reason is None:
                result.delivered.append(record_id)
            else:
                result.failed[record_id] = reason

        if result.failed:
            logger.debug(
                f"Broadcast of {envelope.type} reached "
                f"{len(result.delivered)}/{len(records)} recipients"
            )
        return result

    def _deliver(self, record: ConnectionRecord, text: str) -> str | None:
        if not record.channel.is_open:
            logger.debug(f"Skipping {record.role} {record.id}: channel is closed")
            MetricsCollector.record_send_failure("closed")
            return "closed"

        try:
            record.channel.send(text)
        except SendBufferFullError as e:
            logger.warning(f"Dropped message for {record.role} {record.id}: {e}")
            MetricsCollector.record_send_failure("buffer_full")
            return "buffer_full"
        except ChannelError as e:
            logger.warning(f"Error sending message to {record.role} {record.id}: {e}")
            MetricsCollector.record_send_failure("closed")
            return "closed"
        except Exception as e:
            # Catch-all so one broken channel never aborts a fan-out
            logger.error(
                f"Unexpected error sending message to {record.role} {record.id}: "
                f"{type(e).__name__}: {e}"
            )
            MetricsCollector.record_send_failure("write_error")
            return "write_error"
        return None
