import json

import pytest

from items_api.config import CONNECTIVITY_SERVICE_NAME, ApiConfig
from items_api.core.connectivity import build_connectivity_router
from items_api.dal.in_memory import InMemoryItemStore


@pytest.fixture
def store():
    return InMemoryItemStore(key_attributes=("pk", "sk"), table_name="test-serverless-table")


@pytest.fixture
def router(store):
    config = ApiConfig(table_name="test-serverless-table", service_name=CONNECTIVITY_SERVICE_NAME)
    return build_connectivity_router(store, config)


def test_health(router, api_event):
    response = router.resolve(api_event("GET", "/health"))

    assert response["statusCode"] == 200
    body = json.loads(response["body"])
    assert body["status"] == "healthy"
    assert body["service"] == "test-serverless-api"


def test_connection_ok(router, api_event):
    response = router.resolve(api_event("GET", "/test"))

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {
        "message": "DynamoDB connection successful",
        "tableName": "test-serverless-table",
    }


def test_connection_failure(router, api_event, store, monkeypatch):
    def unreachable():
        raise RuntimeError("Requested resource not found")

    monkeypatch.setattr(store, "describe", unreachable)

    response = router.resolve(api_event("GET", "/test"))

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {
        "error": "DynamoDB connection failed",
        "message": "Requested resource not found",
    }


def test_unknown_endpoint(router, api_event):
    response = router.resolve(api_event("GET", "/items"))

    assert response["statusCode"] == 404
