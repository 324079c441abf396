"""
Thin JSON-RPC client for the upstream Geth endpoint.

Every call is a single POST bounded by a fixed timeout. Transport failures,
non-2xx responses and JSON-RPC error members are all mapped onto
UpstreamError so the tool layer has one failure channel to deal with.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import httpx

from geth_mcp.config import GethConfig, default_config
from geth_mcp.metrics import default_metrics

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Base exception for failures talking to the upstream node."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        self.data = data


class UpstreamTimeoutError(UpstreamError):
    """Raised when the upstream node does not answer within the timeout."""


def _normalize_url(url: str) -> str:
    return url.rstrip("/")


class GethRpcClient:
    """Async JSON-RPC client for a single Geth endpoint."""

    def __init__(
        self,
        config: GethConfig | None = None,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config or default_config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._last_request_id = 0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        # Millisecond clock, bumped when two calls land in the same tick.
        now_ms = int(time.time() * 1000)
        self._last_request_id = max(now_ms, self._last_request_id + 1)
        return self._last_request_id

    def _process_response(self, response: httpx.Response) -> Any:
        if response.status_code < 200 or response.status_code >= 300:
            reason = getattr(response, "reason_phrase", "") or ""
            raise UpstreamError(
                f"Upstream HTTP {response.status_code} {reason}".rstrip(),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Unexpected response from node.", status_code=response.status_code
            ) from exc

        if not isinstance(data, dict):
            raise UpstreamError("Unexpected response from node.", status_code=response.status_code)

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                message = error.get("message") or "unknown error"
                code = error.get("code") if isinstance(error.get("code"), int) else None
                raise UpstreamError(f"Geth error: {message}", code=code, data=error.get("data"))
            raise UpstreamError(f"Geth error: {error}")

        return data.get("result")

    async def call(self, method: str, params: Optional[Sequence[Any]] = None) -> Any:
        """
        Forward one JSON-RPC call to the upstream node.

        Args:
            method: Upstream RPC method name, forwarded verbatim.
            params: Positional parameters, forwarded verbatim.

        Returns:
            The ``result`` member of the upstream response.

        Raises:
            UpstreamTimeoutError: the node did not answer within the timeout.
            UpstreamError: any other transport, HTTP or RPC-level failure.
        """
        url = _normalize_url(self.config.require_rpc_url())
        forwarded: List[Any] = list(params or [])
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "method": method,
            "params": forwarded,
            "id": self._next_request_id(),
        }
        client = await self._get_client()
        default_metrics.incr_upstream_call()
        try:
            response = await asyncio.wait_for(
                client.post(url, json=payload, headers={"Content-Type": "application/json"}),
                timeout=self.config.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("Upstream request timed out for method %s", method)
            raise UpstreamTimeoutError("Upstream request timed out") from exc
        except httpx.RequestError as exc:
            logger.warning("Upstream node unreachable for method %s", method)
            raise UpstreamError(f"Upstream request failed: {exc}") from exc
        return self._process_response(response)


default_client = GethRpcClient()
