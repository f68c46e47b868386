"""
Outbound channel for a single WebSocket connection.

Writes to a socket never happen on the dispatch path. The broadcaster only
enqueues serialized envelopes on the recipient's bounded buffer, and a
per-connection writer task drains it. A slow or dead recipient therefore
fills its own buffer and starts dropping messages instead of stalling the
router.
"""

import asyncio
from typing import Protocol, runtime_checkable

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from control_relay.exceptions import ChannelClosedError, SendBufferFullError
from control_relay.logging import logger
from control_relay.utils.metrics import MetricsCollector


@runtime_checkable
class SendChannel(Protocol):
    """
    Protocol for anything a connection record can send through.

    Uses structural subtyping so tests can substitute in-memory channels.
    """

    @property
    def is_open(self) -> bool:
        """Whether the channel currently accepts messages."""
        ...

    def send(self, text: str) -> None:
        """
        Queue a serialized envelope without blocking.

        Raises:
            ChannelClosedError: If the channel is closed.
            SendBufferFullError: If the message had to be dropped.
        """
        ...


class WebSocketChannel:
    """
    Bounded send buffer plus writer task in front of a WebSocket.

    Attributes:
        connection_id: Identifier used in logs for this connection.
        websocket: The underlying Starlette WebSocket.
    """

    def __init__(
        self,
        connection_id: str,
        websocket: WebSocket,
        queue_size: int,
        send_timeout: float,
    ) -> None:
        self.connection_id = connection_id
        self.websocket = websocket
        self._send_timeout = send_timeout
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    @property
    def pending(self) -> int:
        """Number of messages waiting to be written."""
        return self._queue.qsize()

    def start(self) -> None:
        """Start the writer task. Must be called from the event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(
                self._drain(), name=f"ws-writer-{self.connection_id}"
            )

    def send(self, text: str) -> None:
        if not self.is_open:
            raise ChannelClosedError(
                f"Channel {self.connection_id} is closed"
            )
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull as e:
            raise SendBufferFullError(
                f"Send buffer of channel {self.connection_id} is full "
                f"({self._queue.maxsize} messages)"
            ) from e

    async def _drain(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await asyncio.wait_for(
                    self.websocket.send_text(text), timeout=self._send_timeout
                )
            except (
                WebSocketDisconnect,
                ConnectionError,
                RuntimeError,
                TimeoutError,
            ) as e:
                # WebSocketDisconnect: Peer went away mid-write
                # ConnectionError: Network errors
                # RuntimeError: WebSocket in invalid state
                # TimeoutError: Write did not finish within WS_SEND_TIMEOUT_SECONDS
                logger.warning(
                    f"Write to connection {self.connection_id} failed: "
                    f"{type(e).__name__}: {e}"
                )
                MetricsCollector.record_send_failure("write_error")
                self._closed = True
                return
            MetricsCollector.record_message_sent()

    async def close(self) -> None:
        """
        Stop the writer task and drop anything still queued.

        Does not close the socket; the transport owns the socket lifecycle.
        """
        self._closed = True
        if self._writer is None:
            return

        self._writer.cancel()
        await asyncio.gather(self._writer, return_exceptions=True)
        self._writer = None

        dropped = self._queue.qsize()
        if dropped:
            logger.debug(
                f"Dropped {dropped} unsent messages for connection "
                f"{self.connection_id}"
            )
