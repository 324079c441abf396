"""Tool catalog: canonical eth/admin/debug/txpool tools plus friendly aliases."""

from typing import Any, Optional

from geth_mcp.config import GethConfig, default_config
from geth_mcp.mcp import ToolRegistry

from .admin import ADMIN_TOOLS, register_admin_tools
from .debug import DEBUG_TOOLS, register_debug_tools
from .eth import ETH_ALIASES, ETH_TOOLS, register_eth_tools
from .txpool import TXPOOL_TOOLS, register_txpool_tools


def build_registry(client: Any, config: Optional[GethConfig] = None) -> ToolRegistry:
    """Register every tool against ``client`` and return the finalized registry."""
    config = config or default_config
    registry = ToolRegistry()
    register_eth_tools(registry, client, config)
    register_admin_tools(registry, client)
    register_debug_tools(registry, client)
    register_txpool_tools(registry, client)
    return registry.finalize()


__all__ = [
    "ADMIN_TOOLS",
    "DEBUG_TOOLS",
    "ETH_ALIASES",
    "ETH_TOOLS",
    "TXPOOL_TOOLS",
    "build_registry",
]
