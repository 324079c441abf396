"""Minimal sanity checks for the Geth MCP tools against a running node."""

from __future__ import annotations

import asyncio
import json
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from geth_mcp.config import default_config  # noqa: E402
from geth_mcp.geth_api import default_client  # noqa: E402
from geth_mcp.mcp import call_tool  # noqa: E402
from geth_mcp.tools import build_registry  # noqa: E402

# Zero address by default; override via env.
SAMPLE_ADDRESS = os.getenv("GETH_SAMPLE_ADDRESS", "0x0000000000000000000000000000000000000000")
# Opt-in to txpool inspection (can be large on busy nodes).
RUN_TXPOOL = os.getenv("RUN_TXPOOL_SANITY", "false").lower() in {"1", "true", "yes"}


async def _show(registry, label: str, name: str, arguments=None) -> None:
    result = await call_tool(registry.resolve(name), arguments)
    print(f"{label}:", json.loads(result["content"][0]["text"]))


async def main() -> None:
    registry = build_registry(default_client, default_config)
    try:
        await _show(registry, "Block number", "getBlockNumber")
        await _show(registry, "Chain id", "chainId")
        await _show(registry, "Syncing", "isSyncing")
        await _show(registry, "Gas price", "gasPrice")
        await _show(registry, "Balance", "getBalance", {"address": SAMPLE_ADDRESS})
        await _show(registry, "Latest block", "getBlockByNumber", {"block": "latest"})
        if RUN_TXPOOL:
            await _show(registry, "Txpool status", "txpool_status")
    finally:
        await default_client.aclose()


if __name__ == "__main__":
    asyncio.run(main())
