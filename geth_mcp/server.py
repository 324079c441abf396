"""FastAPI application exposing the Geth tool registry over MCP-style JSON-RPC."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from geth_mcp import mcp
from geth_mcp.config import ConfigError, GethConfig, default_config
from geth_mcp.geth_api import GethRpcClient, default_client
from geth_mcp.metrics import default_metrics
from geth_mcp.tools import build_registry
from geth_mcp.tools.formatting import hex_to_decimal

logger = logging.getLogger(__name__)

APP_VERSION = "1.1.0"
MCP_SERVER_NAME = "geth-mcp-proxy"
MCP_SERVER_VERSION = APP_VERSION
PROTOCOL_VERSION = "2025-06-18"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in ("tool", "request_id", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


def configure_logging(config: GethConfig) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(level=level)


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def _log_tool_result(tool_name: str, error: Optional[str] = None, request_id: Optional[str] = None) -> None:
    if error is not None:
        logger.warning(
            "tool=%s outcome=error error=%s request_id=%s",
            tool_name,
            error,
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": error},
        )
        default_metrics.record_tool(tool_name, success=False)
    else:
        logger.info(
            "tool=%s outcome=success request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )
        default_metrics.record_tool(tool_name, success=True)


def create_app(
    config: Optional[GethConfig] = None,
    client: Any = None,
    registry: Optional[mcp.ToolRegistry] = None,
) -> FastAPI:
    """
    Build the proxy application.

    ``client`` is anything with an async ``call(method, params)``; it defaults
    to the shared GethRpcClient. ``registry`` defaults to the full tool
    catalog bound to that client. All three end up on ``app.state``.
    """
    config = config or default_config
    if client is None:
        client = default_client if config is default_config else GethRpcClient(config)
    if registry is None:
        registry = build_registry(client, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        config.require_rpc_url()
        logger.info(
            "MCP server listening at http://localhost:%s/mcp/ with %d tools",
            config.port,
            len(registry),
        )
        yield
        # Shutdown
        close = getattr(client, "aclose", None)
        if close is not None:
            await close()

    app = FastAPI(
        title="Geth MCP Proxy",
        description="Geth JSON-RPC methods exposed as MCP tools.",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.client = client
    app.state.registry = registry

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        default_metrics.incr_request()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        default_metrics.record_duration(request_id, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/mcp")
    @app.get("/mcp/")
    async def health() -> JSONResponse:
        """Health probe listing every exposed tool name."""
        return JSONResponse(
            content={
                "status": "ok",
                "name": MCP_SERVER_NAME,
                "port": config.port,
                "tools": registry.names(),
            }
        )

    @app.head("/mcp")
    @app.head("/mcp/")
    async def health_head() -> Response:
        return Response(status_code=200)

    @app.get("/metrics")
    async def metrics() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=default_metrics.snapshot())

    @app.get("/blockNumber")
    async def block_number() -> JSONResponse:
        """REST shortcut for the latest block number, bypassing MCP."""
        try:
            hex_value = await client.call("eth_blockNumber", [])
        except Exception as exc:
            logger.warning("blockNumber lookup failed: %s", exc, extra={"error": str(exc)})
            return JSONResponse(status_code=500, content={"error": str(exc)})
        return JSONResponse(
            content={"blockNumberHex": hex_value, "blockNumberDecimal": hex_to_decimal(hex_value)}
        )

    @app.post("/mcp")
    @app.post("/mcp/")
    async def mcp_gateway(request: Request) -> JSONResponse:
        """
        Stateless JSON-RPC gateway for MCP clients.

        Supported methods:
          - initialize
          - tools/list
          - tools/call
        Anything else is answered with -32601 and HTTP 200.
        """
        request_id = getattr(request.state, "request_id", None)
        start_time = time.time()

        def _respond(
            payload: Dict[str, Any],
            status_code: int = 200,
            *,
            outcome: str,
            method_label: Optional[str] = None,
            tool_label: Optional[str] = None,
            error_code: Optional[int] = None,
        ) -> JSONResponse:
            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
                outcome,
                method_label,
                tool_label,
                payload.get("id"),
                status_code,
                duration_ms,
                error_code,
                extra={"request_id": request_id, "tool": tool_label, "error": error_code},
            )
            return JSONResponse(status_code=status_code, content=payload)

        raw_body = await request.body()
        if not raw_body:
            payload = _jsonrpc_error_payload(None, mcp.INVALID_REQUEST, "Empty request body")
            return _respond(payload, status_code=400, outcome="error", error_code=mcp.INVALID_REQUEST)

        try:
            body = json.loads(raw_body)
        except ValueError:
            payload = _jsonrpc_error_payload(None, mcp.PARSE_ERROR, "Parse error")
            return _respond(payload, status_code=400, outcome="error", error_code=mcp.PARSE_ERROR)

        if not isinstance(body, dict):
            payload = _jsonrpc_error_payload(None, mcp.INVALID_REQUEST, "Invalid request")
            return _respond(payload, status_code=400, outcome="error", error_code=mcp.INVALID_REQUEST)

        method = body.get("method")
        rpc_id = body.get("id")
        params = body.get("params")

        if method == "initialize":
            result = {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
                "capabilities": {
                    "tools": registry.capabilities(),
                    "roots": {"listChanged": False},
                },
            }
            return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

        if method == "tools/list":
            result = {"tools": registry.list_tools()}
            return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

        if method == "tools/call":
            if not isinstance(params, dict):
                payload = _jsonrpc_error_payload(rpc_id, mcp.INVALID_PARAMS, "Missing params")
                return _respond(
                    payload,
                    status_code=400,
                    outcome="error",
                    method_label=method,
                    error_code=mcp.INVALID_PARAMS,
                )
            tool_name = params.get("name")
            tool = registry.resolve(tool_name)
            if tool is None:
                logger.warning("Unknown tool requested: %s", tool_name, extra={"request_id": request_id})
                payload = _jsonrpc_error_payload(rpc_id, mcp.METHOD_NOT_FOUND, f"Unknown tool: {tool_name}")
                return _respond(
                    payload,
                    status_code=404,
                    outcome="error",
                    method_label=method,
                    tool_label=str(tool_name),
                    error_code=mcp.METHOD_NOT_FOUND,
                )
            try:
                result = await mcp.call_tool(tool, params.get("arguments"))
            except Exception as exc:
                message = str(exc) or "Tool execution error"
                _log_tool_result(tool_name, error=message, request_id=request_id)
                payload = _jsonrpc_error_payload(rpc_id, mcp.TOOL_EXECUTION_ERROR, message)
                return _respond(
                    payload,
                    status_code=500,
                    outcome="error",
                    method_label=method,
                    tool_label=tool_name,
                    error_code=mcp.TOOL_EXECUTION_ERROR,
                )
            _log_tool_result(tool_name, request_id=request_id)
            return _respond(
                _jsonrpc_success_payload(rpc_id, result),
                outcome="success",
                method_label=method,
                tool_label=tool_name,
            )

        payload = _jsonrpc_error_payload(rpc_id, mcp.METHOD_NOT_FOUND, "Method not found")
        return _respond(
            payload,
            outcome="error",
            method_label=str(method),
            error_code=mcp.METHOD_NOT_FOUND,
        )

    return app


configure_logging(default_config)
app = create_app()


# Run with: uvicorn geth_mcp.server:app  (or the geth-mcp-proxy console script)
def main() -> None:
    """Validate configuration and serve the default app with uvicorn."""
    try:
        default_config.require_rpc_url()
    except ConfigError as exc:
        logger.error("%s", exc, extra={"error": str(exc)})
        raise SystemExit(1) from exc
    uvicorn.run(app, host=default_config.host, port=default_config.port)


if __name__ == "__main__":
    main()
