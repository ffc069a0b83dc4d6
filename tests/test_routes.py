import json

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.geoprocessing.domain.exceptions import StoreError
from src.geoprocessing.domain.models import CACHE_HEADER
from src.geoprocessing.domain.models.options import ExecutionMode
from src.geoprocessing.infrastructure.postgres.orm import PostgresOrm
from src.geoprocessing.infrastructure.postgres.repositories import PostgresTaskStore
from src.geoprocessing.presentation.routes import router
from tests.conftest import POLYGON_SKETCH, CountingFunction


@pytest.fixture
def api_client(clean_registry, make_handler):
    """Test client over the gateway router with one sync and one async service."""
    func = CountingFunction(result={"area": 5})
    clean_registry.register(make_handler(func, title="area"))
    clean_registry.register(
        make_handler(func, title="slowArea", mode=ExecutionMode.ASYNC, ASYNC_HANDLER_FUNCTION_NAME="w")
    )
    app = FastAPI()
    app.include_router(router)
    return TestClient(app), func


def test_post_body_runs_the_service(api_client) -> None:
    client, func = api_client

    response = client.post("/area", content=json.dumps({"geometry": POLYGON_SKETCH}))

    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["data"] == {"area": 5}
    assert func.calls == 1


def test_cached_results_carry_cache_header(api_client) -> None:
    client, func = api_client
    body = json.dumps({"geometry": POLYGON_SKETCH, "cacheKey": "k1"})

    client.post("/area", content=body, headers={"x-request-id": "r1"})
    response = client.post("/area", content=body, headers={"x-request-id": "r2"})

    assert response.headers[CACHE_HEADER] == "Cache hit"
    assert func.calls == 1


def test_replayed_request_id_returns_empty_body(api_client) -> None:
    client, func = api_client
    body = json.dumps({"geometry": POLYGON_SKETCH})

    client.post("/area", content=body, headers={"x-request-id": "r1"})
    response = client.post("/area", content=body, headers={"x-request-id": "r1"})

    assert response.status_code == 200
    assert response.content == b""
    assert func.calls == 1


def test_failed_geometry_fetch_is_a_500_task(api_client) -> None:
    client, _ = api_client

    response = client.get("/area", params={"geometryUri": "https://x/404.json"})

    assert response.status_code == 500
    assert response.json()["error"] == "Failed to retrieve geometry from https://x/404.json"


def test_async_service_returns_pending(api_client, invoker) -> None:
    client, func = api_client

    response = client.get("/slowArea", params={"geometryUri": "https://x/a.json", "cacheKey": "k"})

    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert func.calls == 0
    assert len(invoker.invocations) == 1


def test_malformed_request_is_400(api_client) -> None:
    client, _ = api_client

    response = client.get("/area", params={"cacheKey": "k1"})

    assert response.status_code == 400


def test_store_outage_is_503(api_client, store) -> None:
    client, _ = api_client

    async def unavailable(*args, **kwargs):
        raise StoreError("create", "timeout")

    store.create = unavailable

    response = client.post("/area", content=json.dumps({"geometry": POLYGON_SKETCH}))

    assert response.status_code == 503


def test_unknown_service_is_404(api_client) -> None:
    client, _ = api_client

    assert client.get("/nope", params={"geometryUri": "https://x/a.json"}).status_code == 404


def test_task_lookup(api_client) -> None:
    client, _ = api_client
    client.post("/area", content=json.dumps({"geometry": POLYGON_SKETCH, "cacheKey": "k7"}))

    found = client.get("/area/tasks/k7")
    missing = client.get("/area/tasks/unknown")

    assert found.status_code == 200
    assert found.json()["id"] == "k7"
    assert found.json()["status"] == "completed"
    assert missing.status_code == 404


def test_services_are_listed(api_client) -> None:
    client, _ = api_client

    response = client.get("/")

    assert response.json() == {
        "services": [
            {"title": "area", "description": "", "executionMode": "sync"},
            {"title": "slowArea", "description": "", "executionMode": "async"},
        ]
    }


def test_unreachable_database_is_503(api_client, clean_registry) -> None:
    client, _ = api_client
    orm = PostgresOrm("postgresql+asyncpg://gp:gp@127.0.0.1:1/geoprocessing")
    clean_registry.handler_for("area")._store = PostgresTaskStore(orm)

    response = client.post("/area", content=json.dumps({"geometry": POLYGON_SKETCH}))

    assert response.status_code == 503
