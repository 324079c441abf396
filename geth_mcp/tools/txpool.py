"""txpool_* tools."""

from __future__ import annotations

from typing import Any

from geth_mcp.mcp import ToolRegistry
from geth_mcp.tools.forwarding import ForwardTool, Param, register_forward_tools, string

TXPOOL_TOOLS = (
    ForwardTool(
        "txpool_content",
        "Retrieves the transactions contained within the txpool, returning pending as well as queued transactions.",
    ),
    ForwardTool(
        "txpool_contentFrom",
        "Retrieves the transactions contained within the txpool, returning pending as well as queued "
        "transactions of this address, grouped by nonce.",
        (Param("address", string()),),
    ),
    ForwardTool(
        "txpool_inspect",
        "Lists a textual summary of all the transactions currently pending for inclusion in the next block(s), "
        "as well as the ones that are being scheduled for future execution only.",
    ),
    ForwardTool(
        "txpool_status",
        "Returns the number of transactions currently pending for inclusion in the next block(s), as well as "
        "the ones that are being scheduled for future execution only.",
    ),
)


def register_txpool_tools(registry: ToolRegistry, client: Any) -> None:
    register_forward_tools(registry, client, TXPOOL_TOOLS)
