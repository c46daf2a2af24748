"""Tests for request context middleware and error bodies."""

from fastapi.testclient import TestClient


def test_request_id_echoed(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_generated(client: TestClient) -> None:
    response = client.get("/health")

    assert response.headers["X-Request-ID"]


def test_error_body_carries_request_id(client: TestClient) -> None:
    response = client.get("/no-such-route", headers={"X-Request-ID": "req-404"})

    assert response.status_code == 404
    assert response.json() == {
        "error": True,
        "message": "Not Found",
        "status_code": 404,
        "request_id": "req-404",
    }


def test_validation_error_details(client: TestClient) -> None:
    response = client.post("/comments", json={"siteUrl": "https://x.com"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation error"
    assert any(detail["field"].endswith("content") for detail in body["details"])


def test_cors_allows_any_origin(client: TestClient) -> None:
    response = client.options(
        "/comments",
        headers={
            "Origin": "https://blog.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
