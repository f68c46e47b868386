from fastapi import APIRouter

from control_relay.api.ws.websocket import RelayWebSocketEndpoint
from control_relay.exceptions import MalformedEnvelopeError
from control_relay.logging import logger
from control_relay.settings import app_settings
from control_relay.utils.metrics import MetricsCollector

router = APIRouter()


class Relay(RelayWebSocketEndpoint):
    """
    WebSocket endpoint shared by masters and clients.

    Every frame is decoded into an envelope and dispatched through the
    application's MessageRouter. Nothing a peer sends can close the
    connection or produce an error reply:

    - unparseable frames and invalid fields are logged and dropped
    - frames without a known ``type`` are ignored
    - handler failures are logged and the connection keeps serving
    """

    async def on_receive(self, websocket, data: str | bytes):
        try:
            envelope = self.codec.decode(data)
        except MalformedEnvelopeError as e:
            MetricsCollector.record_message_malformed()
            logger.warning(f"Error processing message: {e}")
            return

        if envelope is None:
            MetricsCollector.record_message_received("unknown")
            logger.debug("Ignoring message without a known type")
            return

        MetricsCollector.record_message_received(envelope.type)
        logger.debug(f"Received {envelope.type} envelope")

        try:
            await self.router.dispatch(self.session, envelope)
        except Exception as e:
            # Catch-all so one bad message never drops the connection
            logger.error(
                f"Error processing {envelope.type} envelope: {e}", exc_info=True
            )


router.add_websocket_route(app_settings.WS_PATH, Relay, name="relay")
