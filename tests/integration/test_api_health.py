from fastapi.testclient import TestClient

from cloudhop.api.app import create_app
from cloudhop.api.deps import get_registry
from cloudhop.platforms.registry import build_default_registry


def test_health_endpoint() -> None:
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: build_default_registry()
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "cloudhop-mcp"
    assert body["version"] == "0.1.0"
    assert body["platforms"] == {"cloudflare": False, "vercel": False, "railway": False}
    assert "timestamp" in body


def test_mcp_discovery_and_tool_catalog() -> None:
    client = TestClient(create_app())

    discovery = client.get("/api/v1/mcp/.well-known").json()
    assert discovery["endpoint"] == "/mcp"
    assert discovery["name"] == "cloudhop-mcp"

    tools = client.get("/api/v1/mcp/tools").json()
    assert [tool["name"] for tool in tools][:3] == ["ping", "help", "authenticate"]
    assert tools[3]["input_schema"]["required"] == ["config"]
