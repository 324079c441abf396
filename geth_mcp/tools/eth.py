"""Core eth_* tools and their friendly aliases."""

from __future__ import annotations

import logging
from typing import Any, Dict

from geth_mcp.config import ALLOW_SEND_RAW_TX_ENV_VAR, GethConfig
from geth_mcp.mcp import ToolRegistry
from geth_mcp.tools.forwarding import (
    ForwardTool,
    Param,
    any_value,
    boolean,
    build_input_schema,
    hex_pair,
    optional,
    raw,
    register_forward_tools,
    string,
    trailing,
)
from geth_mcp.tools.formatting import hex_to_decimal

logger = logging.getLogger(__name__)

SEND_RAW_TX_METHOD = "eth_sendRawTransaction"
SEND_RAW_TX_DISABLED = {
    "skipped": True,
    "error": f"Disabled. Set {ALLOW_SEND_RAW_TX_ENV_VAR}=1 to enable.",
}

ETH_TOOLS = (
    ForwardTool(
        "eth_blockNumber",
        "Retrieve the current block number (hex + decimal).",
        shape=hex_pair("blockNumberHex", "blockNumberDecimal"),
    ),
    ForwardTool(
        "eth_syncing",
        "Check if the node is syncing.",
        shape=lambda result, _arguments: {"syncing": result},
    ),
    ForwardTool(
        "eth_chainId",
        "Get current chain ID (hex + decimal).",
        shape=hex_pair("chainIdHex", "chainIdDecimal"),
    ),
    ForwardTool(
        "eth_gasPrice",
        "Get current gas price (hex + wei decimal).",
        shape=hex_pair("gasPriceHex", "gasPriceWei"),
    ),
    ForwardTool(
        "eth_getBlockByNumber",
        "Fetch block by number/tag.",
        (Param("block", string("Block number (hex) or tag such as latest")), optional("full", boolean(), default=False)),
        shape=raw,
    ),
    ForwardTool(
        "eth_getTransactionByHash",
        "Fetch a transaction by hash.",
        (Param("hash", string()),),
        shape=raw,
    ),
    ForwardTool(
        "eth_simulateV1",
        "The eth_simulateV1 method allows the simulation of multiple blocks and transactions without "
        "creating transactions or creating blocks on the blockchain. It functions similarly to eth_call, "
        "but offers more control.",
        (Param("payload", any_value()), Param("block", any_value())),
    ),
    ForwardTool(
        "eth_createAccessList",
        "This method creates an EIP2930 type accessList based on a given Transaction. The accessList "
        "contains all storage slots and addresses read and written by the transaction, except for the "
        "sender account and the precompiles.",
        (Param("transaction", any_value()), trailing("blockNumberOrTag", any_value())),
    ),
    ForwardTool(
        "eth_getHeaderByNumber",
        "Returns a block header.",
        (Param("blockNumber", any_value()),),
    ),
    ForwardTool(
        "eth_getHeaderByHash",
        "Returns a block header.",
        (Param("blockHash", string()),),
    ),
)

ETH_ALIASES = (
    ("getBlockNumber", "eth_blockNumber", "Retrieve the current block number (hex + decimal)."),
    ("eth_getBlockNumber", "eth_blockNumber", "Alias of getBlockNumber."),
    ("getBalance", "eth_getBalance", "Get balance of an address (hex + decimal)."),
    ("ethCallRaw", "eth_callRaw", None),
    ("eth_isSyncing", "eth_syncing", None),
    ("isSyncing", "eth_syncing", "Check if the node is syncing (alias of eth_isSyncing)."),
    ("chainId", "eth_chainId", "Get current chain ID (alias of eth_chainId)."),
    ("gasPrice", "eth_gasPrice", "Get current gas price (alias of eth_gasPrice)."),
    ("getBlockByNumber", "eth_getBlockByNumber", "Fetch block by number/tag (alias of eth_getBlockByNumber)."),
    ("getTransactionByHash", "eth_getTransactionByHash", "Fetch a transaction by hash (alias of eth_getTransactionByHash)."),
    ("call", "eth_call", "Execute a call without a transaction (alias of eth_call)."),
    ("estimateGas", "eth_estimateGas", "Estimate gas for a transaction (alias of eth_estimateGas)."),
    ("sendRawTransaction", "eth_sendRawTransaction", "Broadcast a signed raw transaction (alias of eth_sendRawTransaction)."),
)

_TX_FIELDS = ("to", "from", "data", "value")


def register_eth_tools(registry: ToolRegistry, client: Any, config: GethConfig) -> None:
    """Register core tools on ``registry`` and declare their aliases."""

    async def get_balance(arguments: Dict[str, Any]) -> Dict[str, Any]:
        address = arguments["address"]
        block = arguments.get("block") or "latest"
        hex_value = await client.call("eth_getBalance", [address, block])
        return {"address": address, "balanceHex": hex_value, "balanceWei": hex_to_decimal(hex_value)}

    async def call_raw(arguments: Dict[str, Any]) -> Dict[str, Any]:
        method = arguments["method"]
        params = arguments.get("params") or []
        if method == SEND_RAW_TX_METHOD and not config.allow_send_raw_tx:
            logger.warning("Refusing passthrough %s: broadcasting is disabled", method)
            return dict(SEND_RAW_TX_DISABLED)
        result = await client.call(method, params)
        return {"method": method, "params": params, "result": result}

    async def eth_call(arguments: Dict[str, Any]) -> Dict[str, Any]:
        call = {"to": arguments["to"], "data": arguments["data"]}
        result = await client.call("eth_call", [call, arguments.get("block") or "latest"])
        return {"result": result}

    async def estimate_gas(arguments: Dict[str, Any]) -> Dict[str, Any]:
        tx = {key: arguments[key] for key in _TX_FIELDS if arguments.get(key) is not None}
        result = await client.call("eth_estimateGas", [tx])
        return {"gasHex": result, "gasDecimal": hex_to_decimal(result)}

    async def send_raw_transaction(arguments: Dict[str, Any]) -> Dict[str, Any]:
        if not config.allow_send_raw_tx:
            return dict(SEND_RAW_TX_DISABLED)
        tx_hash = await client.call(SEND_RAW_TX_METHOD, [arguments["rawTx"]])
        return {"txHash": tx_hash}

    register_forward_tools(registry, client, ETH_TOOLS)
    registry.register(
        "eth_getBalance",
        "Get balance of an address (hex + decimal).",
        build_input_schema((Param("address", string()), optional("block", string(), default="latest"))),
        get_balance,
    )
    registry.register(
        "eth_callRaw",
        "Call any Ethereum JSON-RPC method with params array.",
        {
            "type": "object",
            "properties": {"method": {"type": "string"}, "params": {"type": "array"}},
            "required": ["method"],
            "additionalProperties": False,
        },
        call_raw,
    )
    registry.register(
        "eth_call",
        "Execute a call without a transaction.",
        build_input_schema((Param("to", string()), Param("data", string()), optional("block", string(), default="latest"))),
        eth_call,
    )
    registry.register(
        "eth_estimateGas",
        "Estimate gas for a transaction.",
        build_input_schema(optional(key, string()) for key in _TX_FIELDS),
        estimate_gas,
    )
    registry.register(
        SEND_RAW_TX_METHOD,
        "Broadcast a signed raw transaction (hex). WARNING: ensure the tx is trusted.",
        build_input_schema((Param("rawTx", string()),)),
        send_raw_transaction,
    )

    for alias_name, target_name, description in ETH_ALIASES:
        registry.alias(alias_name, target_name, description)
