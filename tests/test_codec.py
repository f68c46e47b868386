"""
Tests for the JSON envelope codec.

Covers decoding of every inbound envelope type, the frames that are
silently ignored, the frames that are rejected and outbound encoding.
"""

import json
from datetime import datetime, timezone

import pytest

from control_relay.api.ws.constants import ClientCommand, Role
from control_relay.api.ws.formats import JSONEnvelopeCodec
from control_relay.exceptions import MalformedEnvelopeError
from control_relay.schemas.request import (
    ClientStatusEnvelope,
    HeartbeatEnvelope,
    MasterCommandEnvelope,
    RegisterClientEnvelope,
    RegisterMasterEnvelope,
)
from control_relay.schemas.response import (
    ClientsListEvent,
    ClientSummary,
    CommandEvent,
    RegistrationSuccessEvent,
)


@pytest.fixture
def codec():
    return JSONEnvelopeCodec()


class TestDecode:
    """Tests for JSONEnvelopeCodec.decode."""

    def test_register_master_with_id(self, codec):
        """Test masterId is mapped to master_id."""
        envelope = codec.decode('{"type": "register_master", "masterId": "m1"}')

        assert isinstance(envelope, RegisterMasterEnvelope)
        assert envelope.master_id == "m1"

    def test_register_client_without_id(self, codec):
        """Test a missing clientId decodes to None."""
        envelope = codec.decode('{"type": "register_client"}')

        assert isinstance(envelope, RegisterClientEnvelope)
        assert envelope.client_id is None

    def test_numeric_id_is_coerced_to_string(self, codec):
        """Test numeric ids are accepted as strings."""
        envelope = codec.decode('{"type": "register_client", "clientId": 42}')

        assert envelope.client_id == "42"

    @pytest.mark.parametrize("client_id", [None, False, 0, ""])
    def test_absent_client_id(self, codec, client_id):
        """Test null, false, 0 and "" ids decode as no id."""
        raw = json.dumps({"type": "register_client", "clientId": client_id})

        assert codec.decode(raw).client_id is None

    @pytest.mark.parametrize("master_id", [False, 0, ""])
    def test_absent_master_id(self, codec, master_id):
        raw = json.dumps({"type": "register_master", "masterId": master_id})

        assert codec.decode(raw).master_id is None

    def test_master_command_keeps_data_verbatim(self, codec):
        """Test command data is passed through untouched."""
        data = {"username": "alice", "nested": [1, 2, {"x": None}]}
        raw = json.dumps(
            {"type": "master_command", "command": "perform_login", "data": data}
        )

        envelope = codec.decode(raw)

        assert isinstance(envelope, MasterCommandEnvelope)
        assert envelope.command == "perform_login"
        assert envelope.data == data

    def test_client_status_fields(self, codec):
        """Test camelCase status fields are decoded."""
        raw = json.dumps(
            {
                "type": "client_status",
                "status": "busy",
                "activity": "training",
                "loginCount": 3,
                "activeAccount": "acc-7",
            }
        )

        envelope = codec.decode(raw)

        assert isinstance(envelope, ClientStatusEnvelope)
        assert envelope.status == "busy"
        assert envelope.activity == "training"
        assert envelope.login_count == 3
        assert envelope.active_account == "acc-7"

    def test_heartbeat(self, codec):
        """Test heartbeat decodes from bytes as well as text."""
        envelope = codec.decode(b'{"type": "heartbeat"}')

        assert isinstance(envelope, HeartbeatEnvelope)

    def test_extra_fields_are_ignored(self, codec):
        """Test unknown fields do not reject the envelope."""
        envelope = codec.decode('{"type": "heartbeat", "uptime": 12}')

        assert isinstance(envelope, HeartbeatEnvelope)

    @pytest.mark.parametrize(
        "raw",
        [
            '{"type": "reboot"}',
            '{"command": "clear_cache"}',
            '{"type": 5}',
            "[1, 2, 3]",
            '"register_master"',
            "null",
        ],
    )
    def test_frames_without_known_type_are_ignored(self, codec, raw):
        """Test frames without a known type decode to None."""
        assert codec.decode(raw) is None

    @pytest.mark.parametrize("raw", ["{not json", "", b"\x80\x81\x82\x83"])
    def test_unparseable_frame_raises(self, codec, raw):
        """Test invalid JSON raises MalformedEnvelopeError."""
        with pytest.raises(MalformedEnvelopeError):
            codec.decode(raw)

    def test_invalid_fields_raise(self, codec):
        """Test a known type with invalid fields raises MalformedEnvelopeError."""
        with pytest.raises(MalformedEnvelopeError, match="master_command"):
            codec.decode('{"type": "master_command"}')


class TestEncode:
    """Tests for JSONEnvelopeCodec.encode."""

    def test_camel_case_and_none_omitted(self, codec):
        """Test outbound fields use camelCase and None fields are absent."""
        text = codec.encode(
            RegistrationSuccessEvent(role=Role.MASTER, master_id="m1")
        )

        assert json.loads(text) == {
            "type": "registration_success",
            "role": "master",
            "masterId": "m1",
        }

    def test_command_without_data(self, codec):
        """Test a command without data has no data key."""
        text = codec.encode(CommandEvent(command=ClientCommand.STATUS))

        assert json.loads(text) == {"type": "command", "command": "status"}

    def test_clients_list(self, codec):
        """Test client summaries are encoded with camelCase keys."""
        connected_at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        event = ClientsListEvent(
            clients=[
                ClientSummary(
                    id="c1",
                    connected_at=connected_at,
                    last_heartbeat=1767323045000,
                    status="idle",
                )
            ]
        )

        message = json.loads(codec.encode(event))

        assert message["type"] == "clients_list"
        assert message["clients"] == [
            {
                "id": "c1",
                "connectedAt": "2026-01-02T03:04:05Z",
                "lastHeartbeat": 1767323045000,
                "status": "idle",
            }
        ]

    def test_format_name(self, codec):
        assert codec.format_name == "json"
