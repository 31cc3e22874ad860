import httpx
import pytest
from fastapi.testclient import TestClient

from arena_proxy.app import create_app
from arena_proxy.bootstrap import bootstrap, env
from arena_proxy.config import Config


def upstream(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/down":
        raise httpx.ConnectError("Connection refused", request=request)
    return httpx.Response(
        200,
        headers={"content-type": "application/json", "x-ratelimit-limit": "100"},
        json={"path": request.url.path, "query": request.url.query.decode()},
    )


def test_app_forwards_every_method():
    bootstrap(Config(), transport=httpx.MockTransport(upstream))
    assert env.forwarder.config.upstream_origin == "https://lmarena.ai"
    with TestClient(create_app()) as client:
        response = client.get("/api/proxy/v1/models?limit=2")
        assert response.status_code == 200
        assert response.json() == {"path": "/v1/models", "query": "limit=2"}
        assert response.headers["x-ratelimit-limit"] == "100"
        assert response.headers["access-control-allow-origin"] == "*"

        for method in ("post", "put", "patch", "delete"):
            response = client.request(method.upper(), "/api/proxy/items/1", content=b"{}")
            assert response.status_code == 200
            assert response.json()["path"] == "/items/1"

        response = client.options(
            "/api/proxy/v1/chat/completions",
            headers={"Access-Control-Request-Method": "POST"},
        )
        assert response.status_code == 204
        assert response.headers["access-control-allow-methods"] == "POST"

        response = client.get("/down")
        assert response.status_code == 502
        assert response.json() == {"error": "upstream_error"}


def test_create_app_requires_bootstrap(monkeypatch):
    monkeypatch.setattr(env, "forwarder", None)
    with pytest.raises(RuntimeError, match="bootstrap"):
        create_app()
