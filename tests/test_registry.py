import json
import logging

import pytest
from jsonschema.exceptions import SchemaError

from geth_mcp.config import GethConfig
from geth_mcp.mcp import (
    DanglingAliasError,
    DuplicateToolError,
    RegistryFrozenError,
    ToolRegistry,
    ToolValidationError,
    call_tool,
    is_canonical_name,
    wrap_tool_result,
)
from geth_mcp.tools import ETH_ALIASES, build_registry

EMPTY_SCHEMA = {"type": "object", "properties": {}, "additionalProperties": False}
ADDRESS_SCHEMA = {
    "type": "object",
    "properties": {"address": {"type": "string"}},
    "required": ["address"],
    "additionalProperties": False,
}


class StubClient:
    def __init__(self):
        self.calls = []

    async def call(self, method, params=None):
        self.calls.append((method, list(params or [])))
        return None


async def _noop(arguments):
    return {"ok": True, "arguments": arguments}


def test_is_canonical_name():
    assert is_canonical_name("eth_blockNumber")
    assert is_canonical_name("txpool_status")
    assert not is_canonical_name("getBlockNumber")
    assert not is_canonical_name("")
    assert not is_canonical_name("net_version")


def test_register_skips_non_canonical_names(caplog):
    registry = ToolRegistry()
    with caplog.at_level(logging.WARNING):
        assert registry.register("getBlockNumber", "desc", EMPTY_SCHEMA, _noop) is None
    assert "getBlockNumber" not in registry
    assert "Skipping tool" in caplog.text


def test_register_duplicate_raises():
    registry = ToolRegistry()
    registry.register("eth_chainId", "desc", EMPTY_SCHEMA, _noop)
    with pytest.raises(DuplicateToolError):
        registry.register("eth_chainId", "again", EMPTY_SCHEMA, _noop)


def test_register_rejects_invalid_schema():
    registry = ToolRegistry()
    with pytest.raises(SchemaError):
        registry.register("eth_chainId", "desc", {"type": "not-a-type"}, _noop)


def test_alias_resolves_to_same_definition():
    registry = ToolRegistry()
    target = registry.register("eth_blockNumber", "Canonical.", EMPTY_SCHEMA, _noop)
    registry.alias("getBlockNumber", "eth_blockNumber", "Friendly.")
    registry.finalize()
    assert registry.resolve("getBlockNumber") is target
    assert registry.resolve("getBlockNumber") is registry.resolve("eth_blockNumber")
    listing = {tool["name"]: tool for tool in registry.list_tools()}
    assert listing["getBlockNumber"]["description"] == "Friendly."
    assert listing["eth_blockNumber"]["description"] == "Canonical."
    assert listing["getBlockNumber"]["inputSchema"] is listing["eth_blockNumber"]["inputSchema"]


def test_alias_without_description_inherits_target():
    registry = ToolRegistry()
    registry.register("eth_syncing", "Check sync.", EMPTY_SCHEMA, _noop)
    registry.alias("isSyncing", "eth_syncing")
    registry.finalize()
    assert registry.capabilities()["isSyncing"]["description"] == "Check sync."


def test_alias_may_be_declared_before_target():
    registry = ToolRegistry()
    registry.alias("chainId", "eth_chainId")
    registry.register("eth_chainId", "desc", EMPTY_SCHEMA, _noop)
    registry.finalize()
    assert registry.resolve("chainId") is registry.resolve("eth_chainId")


def test_dangling_alias_fails_finalize():
    registry = ToolRegistry()
    registry.alias("getBalance", "eth_getBalance")
    with pytest.raises(DanglingAliasError, match="getBalance -> eth_getBalance"):
        registry.finalize()
    assert registry.frozen is False


def test_alias_colliding_with_tool_fails_finalize():
    registry = ToolRegistry()
    registry.register("eth_chainId", "desc", EMPTY_SCHEMA, _noop)
    registry.register("eth_gasPrice", "desc", EMPTY_SCHEMA, _noop)
    registry.alias("eth_gasPrice", "eth_chainId")
    with pytest.raises(DuplicateToolError):
        registry.finalize()


def test_registry_is_frozen_after_finalize():
    registry = ToolRegistry()
    registry.register("eth_chainId", "desc", EMPTY_SCHEMA, _noop)
    assert registry.finalize() is registry
    assert registry.finalize() is registry
    with pytest.raises(RegistryFrozenError):
        registry.register("eth_gasPrice", "desc", EMPTY_SCHEMA, _noop)
    with pytest.raises(RegistryFrozenError):
        registry.alias("gasPrice", "eth_gasPrice")


def test_resolve_unknown_and_non_string():
    registry = ToolRegistry().finalize()
    assert registry.resolve("eth_nothing") is None
    assert registry.resolve(None) is None
    assert registry.resolve(["eth_chainId"]) is None


@pytest.mark.asyncio
async def test_call_tool_validates_before_invoking():
    invoked = []

    async def handler(arguments):
        invoked.append(arguments)
        return {}

    registry = ToolRegistry()
    tool = registry.register("eth_getBalance", "desc", ADDRESS_SCHEMA, handler)
    with pytest.raises(ToolValidationError, match="Invalid arguments for eth_getBalance"):
        await call_tool(tool, {})
    with pytest.raises(ToolValidationError, match="at 'address'"):
        await call_tool(tool, {"address": 42})
    with pytest.raises(ToolValidationError):
        await call_tool(tool, {"address": "0xabc", "extra": 1})
    with pytest.raises(ToolValidationError):
        await call_tool(tool, ["0xabc"])
    assert invoked == []


@pytest.mark.asyncio
async def test_call_tool_defaults_missing_arguments():
    registry = ToolRegistry()
    tool = registry.register("eth_chainId", "desc", EMPTY_SCHEMA, _noop)
    result = await call_tool(tool, None)
    assert json.loads(result["content"][0]["text"]) == {"ok": True, "arguments": {}}


def test_wrap_tool_result():
    assert wrap_tool_result("plain") == {"content": [{"type": "text", "text": "plain"}]}
    wrapped = wrap_tool_result({"result": [1, 2]})
    assert wrapped["content"][0]["type"] == "text"
    assert json.loads(wrapped["content"][0]["text"]) == {"result": [1, 2]}


def test_build_registry_catalog():
    registry = build_registry(StubClient(), GethConfig(rpc_url="http://geth.test"))
    assert registry.frozen
    names = registry.names()
    assert len(names) == len(set(names))
    for name in ("eth_blockNumber", "eth_callRaw", "admin_nodeInfo", "debug_traceCall", "txpool_status"):
        assert name in registry
    for alias_name, target_name, _description in ETH_ALIASES:
        assert registry.resolve(alias_name) is registry.resolve(target_name)
    canonical = [name for name in names if is_canonical_name(name)]
    assert len([name for name in canonical if name.startswith("debug_")]) == 52
    assert len([name for name in canonical if name.startswith("admin_")]) == 10
    assert len([name for name in canonical if name.startswith("txpool_")]) == 4
