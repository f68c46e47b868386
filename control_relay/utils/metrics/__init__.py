"""
Prometheus metrics definitions and utilities.

Metrics are defined in submodules and re-exported here. Code that emits
metrics should go through the MetricsCollector facade:

    from control_relay.utils.metrics import MetricsCollector
    MetricsCollector.record_message_received("heartbeat")
"""

from control_relay.utils.metrics._helpers import _get_or_create_gauge
from control_relay.utils.metrics.collector import MetricsCollector
from control_relay.utils.metrics.relay import (
    commands_relayed_total,
    messages_malformed_total,
    messages_received_total,
    messages_sent_total,
    registered_connections,
    send_failures_total,
    ws_connections_active,
    ws_connections_total,
)

app_info = _get_or_create_gauge(
    "relay_app_info",
    "Application information",
    ["version", "python_version", "environment"],
)

__all__ = [
    "MetricsCollector",
    # Connection metrics
    "ws_connections_active",
    "ws_connections_total",
    "registered_connections",
    # Envelope metrics
    "messages_received_total",
    "messages_malformed_total",
    "commands_relayed_total",
    # Fan-out metrics
    "messages_sent_total",
    "send_failures_total",
    # Application metrics
    "app_info",
]
