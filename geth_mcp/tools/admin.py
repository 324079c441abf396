"""admin_* tools (node administration)."""

from __future__ import annotations

from typing import Any

from geth_mcp.mcp import ToolRegistry
from geth_mcp.tools.forwarding import ForwardTool, Param, number, optional, register_forward_tools, string, trailing

_RPC_SERVER_PARAMS = (
    optional("host", string()),
    optional("port", number()),
    optional("cors", string()),
    optional("apis", string()),
)

ADMIN_TOOLS = (
    ForwardTool(
        "admin_exportChain",
        "Exports the current blockchain into a local file. It optionally takes a first and last block number, "
        "in which case it exports only that range of blocks. It returns a boolean indicating whether the "
        "operation succeeded.",
        (Param("file", string()), trailing("first", number()), trailing("last", number())),
    ),
    ForwardTool(
        "admin_importChain",
        "Imports an exported list of blocks from a local file. Importing involves processing the blocks and "
        "inserting them into the canonical chain. The state from the parent block of this range is required. "
        "It returns a boolean indicating whether the operation succeeded.",
        (Param("file", string()),),
    ),
    ForwardTool(
        "admin_nodeInfo",
        "The nodeInfo administrative property can be queried for all the information known about the running "
        "Geth node at the networking granularity.",
    ),
    ForwardTool(
        "admin_peers",
        "The peers administrative property can be queried for all the information known about the connected "
        "remote nodes at the networking granularity.",
    ),
    ForwardTool(
        "admin_removePeer",
        "Disconnects from a remote node if the connection exists. It returns a boolean indicating validations "
        "succeeded. Note a true value doesn't necessarily mean that there was a connection which was disconnected.",
        (Param("url", string()),),
    ),
    ForwardTool(
        "admin_removeTrustedPeer",
        "Removes a remote node from the trusted peer set, but it does not disconnect it automatically. It "
        "returns a boolean indicating validations succeeded.",
        (Param("url", string()),),
    ),
    ForwardTool(
        "admin_startHTTP",
        "Starts an HTTP based JSON-RPC API webserver to handle client requests. All the parameters are "
        'optional: host (defaults to "localhost"), port (defaults to 8545), cors (defaults to ""), apis '
        '(defaults to "eth,net,web3"). Returns whether the HTTP RPC listener was opened.',
        _RPC_SERVER_PARAMS,
    ),
    ForwardTool(
        "admin_startWS",
        "Starts a WebSocket based JSON-RPC API webserver to handle client requests. All the parameters are "
        'optional: host (defaults to "localhost"), port (defaults to 8546), cors (defaults to ""), apis '
        '(defaults to "eth,net,web3"). Returns whether the WebSocket RPC listener was opened.',
        _RPC_SERVER_PARAMS,
    ),
    ForwardTool(
        "admin_stopHTTP",
        "Closes the currently open HTTP RPC endpoint, returning a boolean whether the endpoint was closed or not.",
    ),
    ForwardTool(
        "admin_stopWS",
        "Closes the currently open WebSocket RPC endpoint, returning a boolean whether the endpoint was closed "
        "or not.",
    ),
)


def register_admin_tools(registry: ToolRegistry, client: Any) -> None:
    register_forward_tools(registry, client, ADMIN_TOOLS)
