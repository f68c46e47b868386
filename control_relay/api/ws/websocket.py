import time
import uuid
from typing import Any

from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from control_relay.api.ws.channel import WebSocketChannel
from control_relay.api.ws.formats import JSONEnvelopeCodec
from control_relay.exceptions import ChannelError
from control_relay.logging import clear_log_context, logger, set_log_context
from control_relay.middlewares.correlation_id import set_correlation_id
from control_relay.routing import MessageRouter
from control_relay.schemas.connection import ConnectionSession
from control_relay.schemas.response import WelcomeEvent
from control_relay.settings import app_settings
from control_relay.utils.metrics import MetricsCollector


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint bound to the application's MessageRouter.

    Manages the connection lifecycle: opens the outbound channel and greets
    the peer on connect, and releases everything the connection registered
    on disconnect. The relay never closes a socket itself.
    """

    encoding = None  # Frames are handed to the codec as received
    codec = JSONEnvelopeCodec()

    async def decode(
        self, websocket: WebSocket, message: dict[str, Any]
    ) -> str | bytes:
        """
        Return the raw frame payload (text or bytes) without parsing.

        Parsing is left to the envelope codec in on_receive() so a malformed
        frame is logged instead of tearing the connection down.
        """
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def on_connect(self, websocket):  # type: ignore[no-untyped-def]
        """
        Accepts the connection, starts its outbound channel and sends welcome.
        """
        await super().on_connect(websocket)

        self.router: MessageRouter = websocket.app.state.message_router
        self.connection_id = str(uuid.uuid4())

        # One correlation ID for every log line of this connection
        set_correlation_id(self.connection_id)
        set_log_context(connection_id=self.connection_id)

        self.channel = WebSocketChannel(
            self.connection_id,
            websocket,
            queue_size=app_settings.WS_SEND_QUEUE_SIZE,
            send_timeout=app_settings.WS_SEND_TIMEOUT_SECONDS,
        )
        self.channel.start()
        self.session = ConnectionSession(
            connection_id=self.connection_id, channel=self.channel
        )

        MetricsCollector.record_ws_connection_opened()
        logger.info(
            f"New WebSocket connection established ({self.codec.format_name})"
        )

        welcome = WelcomeEvent(
            message=app_settings.WELCOME_MESSAGE,
            timestamp=time.time_ns() // 1_000_000,
        )
        try:
            self.channel.send(self.codec.encode(welcome))
        except ChannelError as e:
            logger.error(f"Error sending welcome message: {e}")

    async def on_disconnect(self, websocket, close_code):  # type: ignore[no-untyped-def]
        """
        Unregisters the connection's records and stops its channel.
        """
        await super().on_disconnect(websocket, close_code)

        if hasattr(self, "session"):
            await self.router.disconnect(self.session)
            await self.channel.close()
            MetricsCollector.record_ws_connection_closed()

        logger.info(f"WebSocket connection closed with code {close_code}")
        clear_log_context()
