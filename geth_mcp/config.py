"""
Configuration helpers for the Geth MCP proxy.

Settings are read once from the environment at startup and are treated as
immutable for the lifetime of the process. A `.env` file in the working
directory (or the file named by GETH_MCP_ENV_FILE) is loaded first; values
already present in the process environment win. The upstream endpoint is
the only required value; everything else has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Union

from dotenv import load_dotenv

RPC_URL_ENV_VAR = "GETH_URL"
PORT_ENV_VAR = "PORT"
HOST_ENV_VAR = "GETH_MCP_HOST"
ALLOW_SEND_RAW_TX_ENV_VAR = "ALLOW_SEND_RAW_TX"
ENV_FILE_ENV_VAR = "GETH_MCP_ENV_FILE"
DEFAULT_ENV_FILE = ".env"

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
# Fixed upper bound for a single upstream call, in seconds.
DEFAULT_RPC_TIMEOUT = 8.0

_TRUTHY = {"1", "true", "yes", "y", "on"}


class ConfigError(Exception):
    """Raised when required configuration is missing or unusable."""


def load_env_file(path: Union[str, os.PathLike, None] = None) -> bool:
    """Load KEY=VALUE pairs from a dotenv file without overriding the environment."""
    path = path or os.getenv(ENV_FILE_ENV_VAR, DEFAULT_ENV_FILE)
    return load_dotenv(path, override=False)


def _load_rpc_url() -> Optional[str]:
    raw = os.getenv(RPC_URL_ENV_VAR)
    if raw is None:
        return None
    raw = raw.strip()
    return raw or None


def _load_port() -> int:
    raw_port = os.getenv(PORT_ENV_VAR)
    if raw_port:
        try:
            return int(raw_port)
        except ValueError:
            return DEFAULT_PORT
    return DEFAULT_PORT


def _load_flag(name: str) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY


@dataclass(slots=True)
class GethConfig:
    """Runtime configuration for the proxy and its upstream node."""

    rpc_url: Optional[str] = None
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    timeout: float = DEFAULT_RPC_TIMEOUT
    allow_send_raw_tx: bool = False
    log_level: str = "INFO"
    log_format: str = "json"  # json or plain

    def require_rpc_url(self) -> str:
        """Return the upstream URL or raise ConfigError if it was never set."""
        if not self.rpc_url:
            raise ConfigError(f"{RPC_URL_ENV_VAR} is not set. Please set it and restart.")
        return self.rpc_url


def load_config() -> GethConfig:
    """Build a GethConfig from the current environment."""
    return GethConfig(
        rpc_url=_load_rpc_url(),
        port=_load_port(),
        host=os.getenv(HOST_ENV_VAR, DEFAULT_HOST),
        allow_send_raw_tx=_load_flag(ALLOW_SEND_RAW_TX_ENV_VAR),
        log_level=os.getenv("GETH_MCP_LOG_LEVEL", "INFO"),
        log_format=os.getenv("GETH_MCP_LOG_FORMAT", "json"),
    )


load_env_file()
default_config = load_config()
