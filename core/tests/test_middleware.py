import pytest


pytestmark = pytest.mark.django_db


def test_request_id_is_echoed(client):
    response = client.get("/health/", HTTP_X_REQUEST_ID="req-123")
    assert response["X-Request-ID"] == "req-123"
    assert response["X-Response-Time"].endswith("s")


def test_request_id_is_generated(client):
    response = client.get("/health/")
    assert len(response["X-Request-ID"]) == 36


def test_health_check(client):
    response = client.get("/health/")

    assert response.status_code == 200
    body = response.json()
    assert body["app"] == "shopstack"
    assert body["checks"] == {"db": True, "cache": True, "celery": "not_checked"}
