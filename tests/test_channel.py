"""
Tests for the WebSocket outbound channel.

This module tests the bounded send buffer, the writer task and how write
failures close the channel.
"""

import asyncio

import pytest
from starlette.websockets import WebSocketDisconnect, WebSocketState

from control_relay.api.ws.channel import SendChannel, WebSocketChannel
from control_relay.exceptions import ChannelClosedError, SendBufferFullError
from tests.mocks.channel_mocks import FakeChannel, create_mock_websocket


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the event loop until predicate() holds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def make_channel(websocket, queue_size: int = 4, send_timeout: float = 1.0):
    return WebSocketChannel(
        "conn-1", websocket, queue_size=queue_size, send_timeout=send_timeout
    )


class TestSendChannelProtocol:
    """Tests for the SendChannel protocol."""

    def test_websocket_channel_is_a_send_channel(self):
        channel = make_channel(create_mock_websocket())

        assert isinstance(channel, SendChannel)

    def test_fake_channel_is_a_send_channel(self):
        assert isinstance(FakeChannel(), SendChannel)


class TestWebSocketChannel:
    """Tests for WebSocketChannel."""

    @pytest.mark.asyncio
    async def test_messages_are_written_in_order(self):
        """Test the writer task drains the buffer in FIFO order."""
        websocket = create_mock_websocket()
        channel = make_channel(websocket)
        channel.start()

        channel.send("first")
        channel.send("second")
        await wait_until(lambda: websocket.send_text.await_count == 2)

        assert [call.args[0] for call in websocket.send_text.await_args_list] == [
            "first",
            "second",
        ]
        await channel.close()

    @pytest.mark.asyncio
    async def test_full_buffer_raises(self):
        """Test send raises once the bounded buffer is full."""
        channel = make_channel(create_mock_websocket(), queue_size=2)

        # Writer not started, so nothing is drained
        channel.send("1")
        channel.send("2")

        with pytest.raises(SendBufferFullError):
            channel.send("3")
        assert channel.pending == 2

    @pytest.mark.asyncio
    async def test_send_after_close_raises(self):
        channel = make_channel(create_mock_websocket())
        channel.start()

        await channel.close()

        assert not channel.is_open
        with pytest.raises(ChannelClosedError):
            channel.send("late")

    def test_disconnected_socket_is_not_open(self):
        websocket = create_mock_websocket()
        websocket.client_state = WebSocketState.DISCONNECTED
        channel = make_channel(websocket)

        assert not channel.is_open
        with pytest.raises(ChannelClosedError):
            channel.send("text")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            WebSocketDisconnect(code=1006),
            ConnectionResetError("reset"),
            RuntimeError("Unexpected ASGI message"),
        ],
    )
    async def test_write_failure_closes_channel(self, error):
        """Test a failed write stops the writer and closes the channel."""
        websocket = create_mock_websocket()
        websocket.send_text.side_effect = error
        channel = make_channel(websocket)
        channel.start()

        channel.send("doomed")
        await wait_until(lambda: not channel.is_open)

        with pytest.raises(ChannelClosedError):
            channel.send("after")
        await channel.close()

    @pytest.mark.asyncio
    async def test_slow_write_times_out(self):
        """Test a write exceeding the send timeout closes the channel."""
        websocket = create_mock_websocket()

        async def never_finishes(text):
            await asyncio.sleep(10)

        websocket.send_text.side_effect = never_finishes
        channel = make_channel(websocket, send_timeout=0.05)
        channel.start()

        channel.send("stuck")
        await wait_until(lambda: not channel.is_open)
        await channel.close()

    @pytest.mark.asyncio
    async def test_close_drops_pending_messages(self):
        """Test close stops the writer even with messages still queued."""
        websocket = create_mock_websocket()
        release = asyncio.Event()

        async def blocked(text):
            await release.wait()

        websocket.send_text.side_effect = blocked
        channel = make_channel(websocket)
        channel.start()
        channel.send("1")
        channel.send("2")
        channel.send("3")

        await channel.close()

        assert not channel.is_open
        assert websocket.send_text.await_count <= 1

    @pytest.mark.asyncio
    async def test_close_without_start(self):
        channel = make_channel(create_mock_websocket())

        await channel.close()

        assert not channel.is_open
