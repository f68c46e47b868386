"""
Facade for centralized metrics emission.

Provides high-level methods for recording metrics without exposing
Prometheus implementation details to the rest of the codebase.
"""


class MetricsCollector:
    """
    Centralized facade for all Prometheus metrics.

    All methods are static for easy use without instantiation.
    """

    # ========== Connection Metrics ==========

    @staticmethod
    def record_ws_connection_opened() -> None:
        from control_relay.utils.metrics import (
            ws_connections_active,
            ws_connections_total,
        )

        ws_connections_total.inc()
        ws_connections_active.inc()

    @staticmethod
    def record_ws_connection_closed() -> None:
        from control_relay.utils.metrics import ws_connections_active

        ws_connections_active.dec()

    @staticmethod
    def set_registered_connections(masters: int, clients: int) -> None:
        """
        Publish the current registry sizes.

        Args:
            masters: Number of registered masters.
            clients: Number of registered clients.
        """
        from control_relay.utils.metrics import registered_connections

        registered_connections.labels(role="master").set(masters)
        registered_connections.labels(role="client").set(clients)

    # ========== Envelope Metrics ==========

    @staticmethod
    def record_message_received(message_type: str) -> None:
        from control_relay.utils.metrics import messages_received_total

        messages_received_total.labels(type=message_type).inc()

    @staticmethod
    def record_message_malformed() -> None:
        from control_relay.utils.metrics import messages_malformed_total

        messages_malformed_total.inc()

    @staticmethod
    def record_command_relayed(command: str) -> None:
        from control_relay.utils.metrics import commands_relayed_total

        commands_relayed_total.labels(command=command).inc()

    # ========== Fan-out Metrics ==========

    @staticmethod
    def record_message_sent() -> None:
        from control_relay.utils.metrics import messages_sent_total

        messages_sent_total.inc()

    @staticmethod
    def record_send_failure(reason: str) -> None:
        """
        Record an envelope that could not be delivered.

        Args:
            reason: One of 'closed', 'buffer_full', 'write_error'
        """
        from control_relay.utils.metrics import send_failures_total

        send_failures_total.labels(reason=reason).inc()
