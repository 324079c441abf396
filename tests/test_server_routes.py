import pytest
from fastapi.testclient import TestClient

from geth_mcp import server
from geth_mcp.config import ConfigError, GethConfig
from geth_mcp.geth_api import UpstreamError
from geth_mcp.metrics import MAX_RECENT_DURATIONS
from geth_mcp.server import create_app


class StubClient:
    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.closed = False

    async def call(self, method, params=None):
        self.calls.append((method, list(params or [])))
        value = self.responses.get(method)
        if isinstance(value, Exception):
            raise value
        return value

    async def aclose(self):
        self.closed = True


@pytest.fixture
def stub():
    return StubClient({"eth_blockNumber": "0x1b4"})


@pytest.fixture
def client(stub):
    return TestClient(create_app(config=GethConfig(rpc_url="http://geth.test", port=3100), client=stub))


@pytest.mark.parametrize("path", ["/mcp", "/mcp/"])
def test_health_route(client, path):
    resp = client.get(path)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["name"] == "geth-mcp-proxy"
    assert body["port"] == 3100
    assert "getBlockNumber" in body["tools"]
    assert "eth_blockNumber" in body["tools"]
    assert "X-Request-ID" in resp.headers


@pytest.mark.parametrize("path", ["/mcp", "/mcp/"])
def test_health_head(client, path):
    resp = client.head(path)
    assert resp.status_code == 200
    assert resp.content == b""


def test_block_number_route(client, stub):
    resp = client.get("/blockNumber")
    assert resp.status_code == 200
    assert resp.json() == {"blockNumberHex": "0x1b4", "blockNumberDecimal": "436"}
    assert stub.calls == [("eth_blockNumber", [])]


def test_block_number_route_upstream_failure():
    stub = StubClient({"eth_blockNumber": UpstreamError("Upstream request timed out")})
    client = TestClient(create_app(config=GethConfig(rpc_url="http://geth.test"), client=stub))
    resp = client.get("/blockNumber")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Upstream request timed out"}


def test_request_ids_are_unique(client):
    first = client.get("/mcp")
    second = client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    assert first.headers["X-Request-ID"] != second.headers["X-Request-ID"]


def test_metrics_route(client):
    client.get("/blockNumber")
    client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": {"name": "getBlockNumber"}})
    resp = client.get("/metrics")
    assert resp.status_code == 200
    data = resp.json()
    assert data["requests"] >= 3
    assert data["tool_success"] == {"getBlockNumber": 1}
    assert data["recent_request_durations_ms"]


def test_lifespan_closes_client(stub):
    app = create_app(config=GethConfig(rpc_url="http://geth.test"), client=stub)
    with TestClient(app) as client:
        assert client.get("/mcp").status_code == 200
    assert stub.closed is True


def test_lifespan_requires_rpc_url(stub):
    app = create_app(config=GethConfig(rpc_url=None), client=stub)
    with pytest.raises(ConfigError):
        with TestClient(app):
            pass


def test_app_state_holds_dependencies(stub):
    config = GethConfig(rpc_url="http://geth.test")
    app = create_app(config=config, client=stub)
    assert app.state.config is config
    assert app.state.client is stub
    assert app.state.registry.frozen


def test_main_exits_without_rpc_url(monkeypatch):
    monkeypatch.setattr(server.default_config, "rpc_url", None)
    with pytest.raises(SystemExit) as excinfo:
        server.main()
    assert excinfo.value.code == 1


def test_main_runs_uvicorn(monkeypatch):
    captured = {}

    def fake_run(app, host, port):
        captured.update(app=app, host=host, port=port)

    monkeypatch.setattr(server.default_config, "rpc_url", "http://geth.test")
    monkeypatch.setattr(server.uvicorn, "run", fake_run)
    server.main()
    assert captured == {"app": server.app, "host": server.default_config.host, "port": server.default_config.port}


def test_metrics_durations_stay_bounded_under_load(client):
    for _ in range(MAX_RECENT_DURATIONS + 50):
        client.get("/mcp")
    data = client.get("/metrics").json()
    assert data["requests"] == MAX_RECENT_DURATIONS + 51
    assert len(data["recent_request_durations_ms"]) == MAX_RECENT_DURATIONS
