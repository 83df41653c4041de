from app.main import create_app

from conftest import FakeImageService, FakeMarketDataService


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "operational"
    assert body["endpoints"]["chat"] == "/api/gpt"


def test_health_degraded_without_services(client):
    response = client.get("/health")

    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "degraded"
    assert body["services"] == {
        "market_data": "unavailable",
        "llm": "unavailable",
        "image": "unavailable",
    }


def test_health_healthy(app, client):
    app.state.market_service = FakeMarketDataService()
    app.state.llm_service = object()
    app.state.image_service = FakeImageService()

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_invalid_body_is_a_client_error(app, client):
    app.state.llm_service = object()

    response = client.post("/api/gpt", json={"prompt": {"nested": "object"}})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid request body"


def test_process_time_header(client):
    response = client.get("/")

    assert "x-process-time" in response.headers


def test_unknown_route_uses_error_body(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_lifespan_builds_configured_clients(settings):
    from fastapi.testclient import TestClient

    settings.API_KEY = "sk-test"
    settings.BFL_API_KEY = "bfl-test"
    app = create_app(settings)

    with TestClient(app) as client:
        assert client.get("/health").json()["status"] == "healthy"
        assert app.state.image_service.max_attempts == settings.IMAGE_POLL_MAX_ATTEMPTS


def test_lifespan_leaves_unconfigured_clients_out(settings):
    from fastapi.testclient import TestClient

    app = create_app(settings)

    with TestClient(app) as client:
        services = client.get("/health").json()["services"]

    assert services == {"market_data": "healthy", "llm": "unavailable", "image": "unavailable"}
