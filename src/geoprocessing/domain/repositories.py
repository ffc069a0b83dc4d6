from __future__ import annotations

from typing import Any, Protocol

from src.geoprocessing.domain.models.request import GeoprocessingRequest
from src.geoprocessing.domain.models.task import GeoprocessingTask


class TaskStore(Protocol):
    """Persistence contract for geoprocessing tasks keyed by (service, id)."""

    async def get(self, service: str, task_id: str) -> GeoprocessingTask | None:
        """Return the task stored under the key, or None."""

    async def create(
        self,
        service: str,
        cache_key: str | None,
        request_id: str | None,
        wss: str | None,
        geometry_uri: str | None = None,
    ) -> GeoprocessingTask:
        """Write a new pending task, replacing any task under the same key."""

    async def complete(self, task: GeoprocessingTask, data: Any) -> GeoprocessingTask:
        """Mark the task completed with its result."""

    async def fail(
        self,
        task: GeoprocessingTask,
        message: str,
        cause: BaseException | None = None,
    ) -> GeoprocessingTask:
        """Mark the task failed with a message."""


class GeometryResolver(Protocol):
    async def resolve(self, request: GeoprocessingRequest) -> dict[str, Any]:
        """Return the Feature or FeatureCollection to compute over."""


class AsyncWorkerInvoker(Protocol):
    async def invoke(
        self,
        worker_name: str,
        payload: dict[str, Any],
        task: GeoprocessingTask,
    ) -> None:
        """Hand the payload to the named worker without waiting for it to run."""
