from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest

from src.geoprocessing.application.guard import InvocationGuard
from src.geoprocessing.application.handler import GeoprocessingHandler
from src.geoprocessing.application.registry import registry
from src.geoprocessing.domain.exceptions import GeometryResolutionError
from src.geoprocessing.domain.models import (
    GeoprocessingRequest,
    GeoprocessingTask,
    GeoprocessingTaskStatus,
)
from src.geoprocessing.domain.models.options import ExecutionMode, GeoprocessingHandlerOptions
from src.geoprocessing.domain.repositories import AsyncWorkerInvoker, GeometryResolver, TaskStore
from src.setup.geoprocessing_config import GeoprocessingSettings

POLYGON_SKETCH: dict[str, Any] = {
    "type": "Feature",
    "properties": {"name": "reef"},
    "geometry": {
        "type": "Polygon",
        "coordinates": [[[-120.0, 34.0], [-119.0, 34.0], [-119.0, 35.0], [-120.0, 34.0]]],
    },
}


class StubTaskStore(TaskStore):
    """In-memory TaskStore replacement with the same last-write-wins semantics."""

    def __init__(self) -> None:
        self.tasks: dict[tuple[str, str], GeoprocessingTask] = {}
        self.calls: list[str] = []

    async def get(self, service: str, task_id: str) -> GeoprocessingTask | None:
        self.calls.append("get")
        return self.tasks.get((service, task_id))

    async def create(
        self,
        service: str,
        cache_key: str | None,
        request_id: str | None,
        wss: str | None,
        geometry_uri: str | None = None,
    ) -> GeoprocessingTask:
        self.calls.append("create")
        task_id = cache_key or uuid4().hex
        task = GeoprocessingTask(
            id=task_id,
            service=service,
            location=f"/{service}/tasks/{task_id}",
            status=GeoprocessingTaskStatus.PENDING,
            request_id=request_id,
            wss=wss,
            geometry_uri=geometry_uri,
            started_at=datetime.now(UTC),
        )
        self.tasks[(service, task_id)] = task
        return task

    async def complete(self, task: GeoprocessingTask, data: Any) -> GeoprocessingTask:
        self.calls.append("complete")
        done = task.model_copy(update={"status": GeoprocessingTaskStatus.COMPLETED, "data": data})
        self.tasks[(task.service, task.id)] = done
        return done

    async def fail(
        self,
        task: GeoprocessingTask,
        message: str,
        cause: BaseException | None = None,
    ) -> GeoprocessingTask:
        self.calls.append("fail")
        failed = task.model_copy(update={"status": GeoprocessingTaskStatus.FAILED, "error": message})
        self.tasks[(task.service, task.id)] = failed
        return failed


class StubGeometryResolver(GeometryResolver):
    def __init__(self) -> None:
        self.requests: list[GeoprocessingRequest] = []

    async def resolve(self, request: GeoprocessingRequest) -> dict[str, Any]:
        self.requests.append(request)
        if request.geometry is not None:
            return request.geometry
        raise GeometryResolutionError(request.geometry_uri, "HTTP 404")


class StubWorkerInvoker(AsyncWorkerInvoker):
    def __init__(self, error: Exception | None = None) -> None:
        self.invocations: list[tuple[str, dict[str, Any], GeoprocessingTask]] = []
        self._error = error

    async def invoke(
        self, worker_name: str, payload: dict[str, Any], task: GeoprocessingTask
    ) -> None:
        if self._error is not None:
            raise self._error
        self.invocations.append((worker_name, payload, task))


class CountingFunction:
    """Geoprocessing function that records how often it ran."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.calls = 0
        self._result = {"area": 42} if result is None else result
        self._error = error

    def __call__(self, feature_set: dict[str, Any]) -> Any:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


@pytest.fixture
def store() -> StubTaskStore:
    return StubTaskStore()


@pytest.fixture
def resolver() -> StubGeometryResolver:
    return StubGeometryResolver()


@pytest.fixture
def invoker() -> StubWorkerInvoker:
    return StubWorkerInvoker()


@pytest.fixture
def exits() -> list[bool]:
    return []


@pytest.fixture
def make_handler(
    store: StubTaskStore,
    resolver: StubGeometryResolver,
    invoker: StubWorkerInvoker,
    exits: list[bool],
) -> Callable[..., GeoprocessingHandler]:
    """Build a handler wired to the stubs; settings keywords override defaults."""

    def factory(
        func: Callable[[dict[str, Any]], Any],
        *,
        mode: ExecutionMode = ExecutionMode.SYNC,
        title: str = "testService",
        **settings: Any,
    ) -> GeoprocessingHandler:
        return GeoprocessingHandler(
            func,
            GeoprocessingHandlerOptions(title=title, execution_mode=mode),
            store=store,
            resolver=resolver,
            invoker=invoker,
            guard=InvocationGuard(),
            settings=GeoprocessingSettings(_env_file=None, **settings),
            exit_process=lambda: exits.append(True),
        )

    return factory


@pytest.fixture
def clean_registry():
    registry.clear()
    yield registry
    registry.clear()
