"""
Prometheus metrics for relay connections, envelopes and fan-out.
"""

from control_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

# Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "relay_ws_connections_active", "Number of open WebSocket connections"
)

ws_connections_total = _get_or_create_counter(
    "relay_ws_connections", "Total WebSocket connections accepted"
)

registered_connections = _get_or_create_gauge(
    "relay_registered_connections",
    "Number of registered connections",
    ["role"],  # master, client
)

# Envelope Metrics
messages_received_total = _get_or_create_counter(
    "relay_messages_received",
    "Total envelopes received",
    ["type"],  # MessageType value, or "unknown"
)

messages_malformed_total = _get_or_create_counter(
    "relay_messages_malformed", "Total inbound messages that failed to decode"
)

commands_relayed_total = _get_or_create_counter(
    "relay_commands_relayed",
    "Total master commands relayed to clients",
    ["command"],  # ClientCommand value
)

# Fan-out Metrics
messages_sent_total = _get_or_create_counter(
    "relay_messages_sent", "Total envelopes written to sockets"
)

send_failures_total = _get_or_create_counter(
    "relay_send_failures",
    "Total envelopes that could not be delivered",
    ["reason"],  # closed, buffer_full, write_error
)
