"""
Declarative forwarding tools.

Most tools are a 1:1 mapping from named MCP arguments to a positional
upstream params list. Each one is described by a ``ForwardTool`` row; the
input schema and the handler are both derived from its ``Param`` list.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from geth_mcp.mcp import ToolHandler, ToolRegistry
from geth_mcp.tools.formatting import hex_to_decimal

logger = logging.getLogger(__name__)

_MISSING = object()

ResultShaper = Callable[[Any, Dict[str, Any]], Any]


def string(description: Optional[str] = None) -> Dict[str, Any]:
    return _typed("string", description)


def number(description: Optional[str] = None) -> Dict[str, Any]:
    return _typed("number", description)


def boolean(description: Optional[str] = None) -> Dict[str, Any]:
    return _typed("boolean", description)


def any_value(description: Optional[str] = None) -> Dict[str, Any]:
    """Opaque JSON value handed to the node without interpretation."""
    return {"description": description} if description else {}


def _typed(json_type: str, description: Optional[str]) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": json_type}
    if description:
        schema["description"] = description
    return schema


@dataclass(frozen=True, slots=True)
class Param:
    """
    One positional upstream parameter.

    ``default`` is forwarded when an optional argument is omitted (or null).
    With ``drop_if_missing`` an omitted trailing argument is left out of the
    upstream params list entirely.
    """

    name: str
    schema: Dict[str, Any]
    required: bool = True
    default: Any = None
    drop_if_missing: bool = False


def optional(name: str, schema: Dict[str, Any], default: Any = None) -> Param:
    return Param(name, schema, required=False, default=default)


def trailing(name: str, schema: Dict[str, Any]) -> Param:
    return Param(name, schema, required=False, drop_if_missing=True)


def as_result(result: Any, _arguments: Dict[str, Any]) -> Any:
    return {"result": result}


def raw(result: Any, _arguments: Dict[str, Any]) -> Any:
    return result


def hex_pair(hex_key: str, decimal_key: str) -> ResultShaper:
    """Shape a hex quantity as ``{hex_key: value, decimal_key: decimal}``."""

    def shape(result: Any, _arguments: Dict[str, Any]) -> Any:
        return {hex_key: result, decimal_key: hex_to_decimal(result)}

    return shape


@dataclass(frozen=True, slots=True)
class ForwardTool:
    name: str
    description: str
    params: Tuple[Param, ...] = ()
    method: Optional[str] = None
    shape: ResultShaper = as_result

    @property
    def upstream_method(self) -> str:
        return self.method or self.name


def build_input_schema(params: Iterable[Param]) -> Dict[str, Any]:
    params = tuple(params)
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {param.name: param.schema for param in params},
        "additionalProperties": False,
    }
    required = [param.name for param in params if param.required]
    if required:
        schema["required"] = required
    return schema


def forward_params(params: Iterable[Param], arguments: Dict[str, Any]) -> List[Any]:
    """Order named arguments into the positional list the node expects."""
    values: List[Any] = []
    for param in params:
        value = arguments.get(param.name)
        if value is None:
            value = _MISSING if param.drop_if_missing else copy.deepcopy(param.default)
        values.append(value)
    while values and values[-1] is _MISSING:
        values.pop()
    # A gap before a supplied trailing value is forwarded as null.
    return [None if value is _MISSING else value for value in values]


def make_forward_handler(client: Any, tool: ForwardTool) -> ToolHandler:
    async def handler(arguments: Dict[str, Any]) -> Any:
        result = await client.call(tool.upstream_method, forward_params(tool.params, arguments))
        return tool.shape(result, arguments)

    handler.__name__ = f"forward_{tool.name}"
    return handler


def register_forward_tools(registry: ToolRegistry, client: Any, tools: Iterable[ForwardTool]) -> None:
    for tool in tools:
        registry.register(
            tool.name,
            tool.description,
            build_input_schema(tool.params),
            make_forward_handler(client, tool),
        )
