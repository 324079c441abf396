"""
Tool registry and invocation surface for MCP-style tooling.

Tools are registered once at startup under canonical RPC-style names
(``eth_``, ``admin_``, ``debug_``, ``txpool_``). Friendly names are declared
as aliases and bound to the canonical definition when the registry is
finalized; a dangling alias aborts startup instead of silently disappearing.
After ``finalize()`` the registry is read-only.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

logger = logging.getLogger(__name__)

# JSON-RPC 2.0 error codes used by the /mcp gateway.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
TOOL_EXECUTION_ERROR = -32000

CANONICAL_PREFIXES: Tuple[str, ...] = ("eth_", "admin_", "debug_", "txpool_")

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class RegistryError(Exception):
    """Base class for registry misconfiguration detected at startup."""


class DuplicateToolError(RegistryError):
    """Raised when a tool or alias name is registered more than once."""


class DanglingAliasError(RegistryError):
    """Raised when an alias points at a tool that was never registered."""


class RegistryFrozenError(RegistryError):
    """Raised when the registry is modified after finalize()."""


class ToolValidationError(Exception):
    """Raised when tool arguments do not satisfy the tool's input schema."""


def is_canonical_name(name: str) -> bool:
    return bool(name) and name.startswith(CANONICAL_PREFIXES)


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ToolHandler
    validator: Draft7Validator = field(repr=False, compare=False)

    def validate(self, arguments: Any) -> Dict[str, Any]:
        """Return the arguments unchanged if they satisfy the schema, else raise ToolValidationError."""
        error = best_match(self.validator.iter_errors(arguments))
        if error is not None:
            location = "/".join(str(part) for part in error.path)
            suffix = f" (at '{location}')" if location else ""
            raise ToolValidationError(f"Invalid arguments for {self.name}: {error.message}{suffix}")
        return arguments


@dataclass(frozen=True, slots=True)
class _PendingAlias:
    alias_name: str
    target_name: str
    description: Optional[str] = None


class ToolRegistry:
    """Name -> ToolDefinition mapping with prefix policy and two-phase aliasing."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}
        # Listed descriptions, keyed by every exposed name (aliases included).
        self._descriptions: Dict[str, str] = {}
        self._pending_aliases: List[_PendingAlias] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Tool registry is frozen; register tools before finalize().")

    def register(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        handler: ToolHandler,
    ) -> Optional[ToolDefinition]:
        """
        Register a canonical tool.

        Names outside the canonical prefix set are logged and skipped. A name
        that is already taken raises DuplicateToolError.
        """
        self._ensure_mutable()
        if not is_canonical_name(name):
            logger.warning("Skipping tool %r: canonical tools must start with one of %s", name, CANONICAL_PREFIXES)
            return None
        if name in self._tools:
            raise DuplicateToolError(f"Tool already registered: {name}")
        Draft7Validator.check_schema(input_schema)
        definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler,
            validator=Draft7Validator(input_schema),
        )
        self._tools[name] = definition
        self._descriptions[name] = description
        logger.debug("Registered tool %s", name)
        return definition

    def alias(self, alias_name: str, target_name: str, description: Optional[str] = None) -> None:
        """Declare ``alias_name`` as an alternate name for ``target_name``; bound by finalize()."""
        self._ensure_mutable()
        if not alias_name:
            raise RegistryError("Alias name must be non-empty.")
        self._pending_aliases.append(_PendingAlias(alias_name, target_name, description))

    def finalize(self) -> "ToolRegistry":
        """
        Bind all pending aliases and freeze the registry.

        Raises:
            DanglingAliasError: one or more alias targets do not exist.
            DuplicateToolError: an alias name collides with an existing name.
        """
        if self._frozen:
            return self
        dangling = [p for p in self._pending_aliases if p.target_name not in self._tools]
        if dangling:
            details = ", ".join(f"{p.alias_name} -> {p.target_name}" for p in dangling)
            raise DanglingAliasError(f"Alias target(s) not registered: {details}")

        seen = set(self._tools)
        for pending in self._pending_aliases:
            if pending.alias_name in seen:
                raise DuplicateToolError(f"Alias name already in use: {pending.alias_name}")
            seen.add(pending.alias_name)

        for pending in self._pending_aliases:
            target = self._tools[pending.target_name]
            self._tools[pending.alias_name] = target
            self._descriptions[pending.alias_name] = pending.description or target.description
        self._pending_aliases.clear()
        self._frozen = True
        logger.info("Tool registry finalized with %d names", len(self._tools))
        return self

    def resolve(self, name: Any) -> Optional[ToolDefinition]:
        if not isinstance(name, str):
            return None
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def list_tools(self) -> List[Dict[str, Any]]:
        """Return the discovery listing in registration order."""
        return [
            {
                "name": name,
                "description": self._descriptions[name],
                "inputSchema": tool.input_schema,
            }
            for name, tool in self._tools.items()
        ]

    def capabilities(self) -> Dict[str, Dict[str, Any]]:
        return {
            name: {"description": self._descriptions[name], "inputSchema": tool.input_schema}
            for name, tool in self._tools.items()
        }

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def wrap_tool_result(result: Any) -> Dict[str, Any]:
    """Shape a tool payload into the MCP content array."""
    if isinstance(result, str):
        return {"content": [{"type": "text", "text": result}]}
    return {"content": [{"type": "text", "text": json.dumps(result)}]}


async def call_tool(tool: ToolDefinition, arguments: Any = None) -> Dict[str, Any]:
    """
    Validate ``arguments`` against the tool's schema, then invoke its handler.

    Validation always runs before the handler, so invalid input never
    reaches the upstream node. Any failure propagates to the caller.
    """
    if arguments is None:
        arguments = {}
    validated = tool.validate(arguments)
    result = await tool.handler(validated)
    return wrap_tool_result(result)
