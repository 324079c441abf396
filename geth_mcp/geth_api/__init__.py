"""JSON-RPC client for the upstream Geth node."""

from .client import (
    GethRpcClient,
    UpstreamError,
    UpstreamTimeoutError,
    default_client,
)

__all__ = [
    "GethRpcClient",
    "UpstreamError",
    "UpstreamTimeoutError",
    "default_client",
]
