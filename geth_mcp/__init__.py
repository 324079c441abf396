"""
Geth MCP proxy package.

Exposes a Geth node's JSON-RPC methods (eth, admin, debug, txpool) as MCP
tools over HTTP. See DESIGN.md for full details.
"""

__all__ = ["config"]
