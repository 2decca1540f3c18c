"""
Relay gateway client (network tier).
"""

from infrastructure.relay.http_relay_client import (
    HttpRelayClient,
    RelayAPIError,
    RelayClientError,
    RelayUnavailable,
)

__all__ = [
    "HttpRelayClient",
    "RelayClientError",
    "RelayUnavailable",
    "RelayAPIError",
]
