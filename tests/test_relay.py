"""Tests for the directory relay endpoint."""
import httpx
import pytest
from fastapi.testclient import TestClient

from worldradio.config import Settings
from worldradio.main import create_app

from .conftest import FakeSink

UPSTREAM = "https://directory.test"


@pytest.fixture
def upstream_requests():
    return []


@pytest.fixture
def client(upstream_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        path = request.url.path
        if path == "/json/stations/topvote/2":
            return httpx.Response(200, json=[{"stationuuid": "a", "name": "A"}])
        if path == "/json/missing":
            return httpx.Response(404, json={"error": "not found"})
        if path == "/json/html":
            return httpx.Response(200, content=b"<html>maintenance</html>", headers={"content-type": "text/html"})
        if path == "/json/down":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=[])

    settings = Settings(upstream_base_url=UPSTREAM)
    app = create_app(settings=settings, transport=httpx.MockTransport(handler), sink=FakeSink(), load_on_startup=False)
    with TestClient(app) as test_client:
        yield test_client


def test_missing_endpoint_is_bad_request(client, upstream_requests):
    response = client.get("/api/radio")

    assert response.status_code == 400
    assert response.text == "Missing endpoint parameter"
    assert response.headers["content-type"].startswith("text/plain")
    assert upstream_requests == []


def test_forwards_json_verbatim(client, upstream_requests):
    response = client.get("/api/radio", params={"endpoint": "/json/stations/topvote/2"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json() == [{"stationuuid": "a", "name": "A"}]
    assert str(upstream_requests[0].url) == f"{UPSTREAM}/json/stations/topvote/2"


def test_forwards_extra_query_params(client, upstream_requests):
    client.get("/api/radio", params={"endpoint": "/json/stations/search", "name": "jazz", "limit": "5"})

    params = upstream_requests[0].url.params
    assert params["name"] == "jazz"
    assert params["limit"] == "5"
    assert "endpoint" not in params


def test_upstream_status_is_passed_through(client):
    response = client.get("/api/radio", params={"endpoint": "/json/missing"})

    assert response.status_code == 404
    assert response.json() == {"error": "not found"}


@pytest.mark.parametrize("endpoint", ["/json/html", "/json/down"])
def test_upstream_failure_is_server_error(client, endpoint):
    response = client.get("/api/radio", params={"endpoint": endpoint})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch"}


@pytest.mark.parametrize("endpoint", [
    "/admin",
    "/json/../admin",
    "//evil.example.com/json/",
    "https://evil.example.com/json/",
])
def test_rejects_endpoints_outside_directory_api(client, upstream_requests, endpoint):
    response = client.get("/api/radio", params={"endpoint": endpoint})

    assert response.status_code == 400
    assert upstream_requests == []


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "stations_loaded": 0}


def test_metrics_exposed(client):
    client.get("/api/radio", params={"endpoint": "/json/stations/topvote/2"})
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "relay_requests_total" in response.text
