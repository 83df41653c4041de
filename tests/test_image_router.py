import pytest

from app.core.exceptions import (
    ImageJobError,
    ImageJobTimeout,
    ImageProviderError,
    MissingImageUrlError,
    MissingJobIdError,
)
from app.routers.image import get_image_service

from conftest import FakeImageService


def use_image_service(app, service):
    app.dependency_overrides[get_image_service] = lambda: service
    return service


def test_generate_image(app, client):
    service = use_image_service(app, FakeImageService())

    response = client.post("/generate-image", json={"stockName": "Tesla"})

    assert response.status_code == 200
    assert response.json() == {"imageUrl": "https://cdn.example.com/logo.png"}
    stock_name, is_disconnected = service.calls[0]
    assert stock_name == "Tesla"
    assert callable(is_disconnected)


@pytest.mark.parametrize("kwargs", [{"json": {}}, {"json": {"stockName": ""}}, {}])
def test_generate_image_requires_stock_name(app, client, kwargs):
    service = use_image_service(app, FakeImageService())

    response = client.post("/generate-image", **kwargs)

    assert response.status_code == 400
    assert response.json() == {"error": "Stock name is required"}
    assert service.calls == []


@pytest.mark.parametrize("error, message", [
    (MissingJobIdError("no id"), "No request ID received from BFL API"),
    (MissingImageUrlError("no url"), "Failed to retrieve the image URL"),
    (ImageJobTimeout("job-1", 120), "Image generation timed out"),
    (ImageJobError("status Error"), "Failed to generate or retrieve image"),
    (ImageProviderError("HTTP 402", status=402, payload={"detail": "Insufficient credits"}),
     "Failed to generate or retrieve image"),
    (RuntimeError("connection reset"), "Failed to generate or retrieve image"),
])
def test_generate_image_failures(app, client, error, message):
    use_image_service(app, FakeImageService(error=error))

    response = client.post("/generate-image", json={"stockName": "Tesla"})

    assert response.status_code == 500
    assert response.json() == {"error": message}


def test_generate_image_service_unavailable(client):
    response = client.post("/generate-image", json={"stockName": "Tesla"})

    assert response.status_code == 503
    assert response.json() == {"error": "Image service unavailable"}
