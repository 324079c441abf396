"""Shared result-formatting helpers for Geth MCP tools."""

from __future__ import annotations

import re
from typing import Any, Optional

HEX_QUANTITY_REGEX = re.compile(r"^0x[0-9a-fA-F]+$")

# Decimal digits rendered per chunk; stays well under the interpreter's
# int-to-str digit limit.
_CHUNK_DIGITS = 1000
_CHUNK = 10**_CHUNK_DIGITS


def _int_to_decimal(value: int) -> str:
    chunks = []
    while value >= _CHUNK:
        value, remainder = divmod(value, _CHUNK)
        chunks.append(remainder)
    head = str(value)
    return head + "".join(f"{chunk:0{_CHUNK_DIGITS}d}" for chunk in reversed(chunks))


def hex_to_decimal(value: Any) -> Optional[str]:
    """Render a 0x-prefixed hex quantity of any size as a base-10 string, or None if it is not one."""
    if not isinstance(value, str) or not HEX_QUANTITY_REGEX.fullmatch(value):
        return None
    return _int_to_decimal(int(value, 16))
