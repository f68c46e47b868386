"""
Tests for the broadcaster.

This module tests single sends and fan-out, in particular that one failing
recipient never keeps the others from receiving an envelope.
"""

import json

from control_relay.api.ws.constants import ClientCommand, Role
from control_relay.managers.broadcaster import Broadcaster
from control_relay.schemas.connection import ConnectionRecord
from control_relay.schemas.response import CommandEvent
from tests.mocks.channel_mocks import (
    FakeChannel,
    create_broken_channel,
    create_fake_channel,
    create_full_channel,
)


def make_record(record_id: str, channel: FakeChannel) -> ConnectionRecord:
    return ConnectionRecord(id=record_id, role=Role.CLIENT, channel=channel)


class TestSendTo:
    """Tests for Broadcaster.send_to."""

    def test_send_to_open_channel(self):
        """Test the envelope is queued on the record's channel."""
        channel = create_fake_channel()
        record = make_record("c1", channel)

        assert Broadcaster().send_to(record, CommandEvent(command=ClientCommand.STATUS))
        assert channel.messages() == [{"type": "command", "command": "status"}]

    def test_send_to_closed_channel(self):
        """Test a closed channel is skipped without raising."""
        channel = create_fake_channel()
        channel.close()
        record = make_record("c1", channel)

        assert not Broadcaster().send_to(
            record, CommandEvent(command=ClientCommand.STATUS)
        )
        assert channel.sent == []


class TestBroadcast:
    """Tests for Broadcaster.broadcast."""

    def test_broadcast_to_empty_mapping(self):
        """Test broadcasting to nobody is a no-op."""
        result = Broadcaster().broadcast({}, CommandEvent(command=ClientCommand.STATUS))

        assert result.delivered == []
        assert result.failed == {}

    def test_failing_recipient_does_not_stop_fan_out(self):
        """Test recipients after a broken one still receive the envelope."""
        first = create_fake_channel("first")
        broken = create_broken_channel()
        third = create_fake_channel("third")
        records = {
            "c1": make_record("c1", first),
            "c2": make_record("c2", broken),
            "c3": make_record("c3", third),
        }

        result = Broadcaster().broadcast(
            records, CommandEvent(command=ClientCommand.CLEAR_CACHE, data={})
        )

        assert sorted(result.delivered) == ["c1", "c3"]
        assert result.failed == {"c2": "write_error"}
        assert first.types() == ["command"]
        assert third.types() == ["command"]

    def test_failure_reasons(self):
        """Test closed and full channels are reported with their reason."""
        closed = create_fake_channel("closed")
        closed.close()
        records = {
            "closed": make_record("closed", closed),
            "full": make_record("full", create_full_channel()),
            "ok": make_record("ok", create_fake_channel("ok")),
        }

        result = Broadcaster().broadcast(
            records, CommandEvent(command=ClientCommand.STATUS)
        )

        assert result.delivered == ["ok"]
        assert result.failed == {"closed": "closed", "full": "buffer_full"}

    def test_envelope_is_serialized_once(self):
        """Test every recipient receives the identical serialized text."""
        channels = [create_fake_channel(f"c{i}") for i in range(3)]
        records = {f"c{i}": make_record(f"c{i}", ch) for i, ch in enumerate(channels)}

        Broadcaster().broadcast(
            records,
            CommandEvent(command=ClientCommand.LOGIN, data={"user": "alice"}),
        )

        texts = {channel.sent[0] for channel in channels}
        assert len(texts) == 1
        assert json.loads(texts.pop()) == {
            "type": "command",
            "command": "login",
            "data": {"user": "alice"},
        }

    def test_mapping_mutated_during_fan_out(self):
        """Test the fan-out iterates over a snapshot of the mapping."""
        records: dict[str, ConnectionRecord] = {}

        class RemovingChannel(FakeChannel):
            def send(self, text: str) -> None:
                super().send(text)
                records.pop("c2", None)

        records["c1"] = make_record("c1", RemovingChannel("c1"))
        records["c2"] = make_record("c2", create_fake_channel("c2"))

        result = Broadcaster().broadcast(
            records, CommandEvent(command=ClientCommand.STATUS)
        )

        assert sorted(result.delivered) == ["c1", "c2"]
