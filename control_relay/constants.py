"""
Application-level constants for hardcoded protocol behavior.

These values are part of the wire contract with masters and clients and
should NEVER be changed via environment variables or configuration.

For configurable values (ports, buffer sizes, timeouts, etc.),
see control_relay/settings.py.
"""

# ============================================================================
# Identity Generation
# ============================================================================

# Prefixes for ids synthesized when a peer registers without one
MASTER_ID_PREFIX = "master"
CLIENT_ID_PREFIX = "client"

# Number of random hex characters appended to generated ids
GENERATED_ID_SUFFIX_LENGTH = 8


# ============================================================================
# Client Status Defaults
# ============================================================================

# Status assigned to a client record at registration
CLIENT_STATUS_CONNECTED = "connected"

# Status reported in clients_list for a client that cleared its status
CLIENT_STATUS_IDLE = "idle"


# ============================================================================
# Status Endpoint
# ============================================================================

SERVER_RUNNING_STATUS = "Server is running"
