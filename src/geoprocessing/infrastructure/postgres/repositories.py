from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.geoprocessing.domain.exceptions import StoreError
from src.geoprocessing.domain.models.task import GeoprocessingTask
from src.geoprocessing.domain.models.task_status import GeoprocessingTaskStatus
from src.geoprocessing.domain.repositories import TaskStore
from src.geoprocessing.infrastructure.postgres.mappers import OrmMapper
from src.geoprocessing.infrastructure.postgres.orm import GeoprocessingTaskRow, PostgresOrm

logger = logging.getLogger(__name__)

# Drivers such as asyncpg raise OSError subclasses for refused or timed-out connections.
_BACKEND_ERRORS = (SQLAlchemyError, OSError)


def _elapsed_ms(started_at: datetime, now: datetime) -> int:
    if started_at.tzinfo is None:
        started_at = started_at.replace(tzinfo=UTC)
    return int((now - started_at).total_seconds() * 1000)


class PostgresTaskStore(TaskStore):
    """Task store on SQLAlchemy async sessions. Writes are upserts, so the last write wins."""

    def __init__(self, orm: PostgresOrm, *, estimate_sample_size: int = 10) -> None:
        self._orm = orm
        self._estimate_sample_size = estimate_sample_size

    async def get(self, service: str, task_id: str) -> GeoprocessingTask | None:
        """Fetch a task by its (service, id) key."""
        try:
            async with self._orm.session_factory() as session:
                row = await session.get(
                    GeoprocessingTaskRow, {"service": service, "id": task_id}
                )
        except _BACKEND_ERRORS as exc:
            raise StoreError("get", str(exc)) from exc
        if row is None:
            return None
        return OrmMapper.to_domain_task(row)

    async def create(
        self,
        service: str,
        cache_key: str | None,
        request_id: str | None,
        wss: str | None,
        geometry_uri: str | None = None,
    ) -> GeoprocessingTask:
        """Persist a new pending task, replacing any previous task under the key."""
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
            estimate=await self.estimate(service),
        )
        await self._write(task, "create")
        return task

    async def complete(self, task: GeoprocessingTask, data: Any) -> GeoprocessingTask:
        """Mark the task completed with its result payload."""
        now = datetime.now(UTC)
        completed = task.model_copy(
            update={
                "status": GeoprocessingTaskStatus.COMPLETED,
                "data": data,
                "error": None,
                "updated_at": now,
                "duration": _elapsed_ms(task.started_at, now),
            }
        )
        await self._write(completed, "complete")
        return completed

    async def fail(
        self,
        task: GeoprocessingTask,
        message: str,
        cause: BaseException | None = None,
    ) -> GeoprocessingTask:
        """Mark the task failed with a message; the cause is only logged."""
        logger.error(
            "Task failed: %s",
            message,
            exc_info=cause,
            extra={"service": task.service, "task_id": task.id},
        )
        now = datetime.now(UTC)
        failed = task.model_copy(
            update={
                "status": GeoprocessingTaskStatus.FAILED,
                "data": None,
                "error": message,
                "updated_at": now,
                "duration": _elapsed_ms(task.started_at, now),
            }
        )
        await self._write(failed, "fail")
        return failed

    async def estimate(self, service: str) -> int | None:
        """Mean duration of the service's most recent completed tasks, in ms."""
        statement = (
            select(GeoprocessingTaskRow.duration)
            .where(GeoprocessingTaskRow.service == service)
            .where(GeoprocessingTaskRow.status == GeoprocessingTaskStatus.COMPLETED)
            .where(GeoprocessingTaskRow.duration.is_not(None))
            .order_by(GeoprocessingTaskRow.updated_at.desc())
            .limit(self._estimate_sample_size)
        )
        try:
            async with self._orm.session_factory() as session:
                result = await session.execute(statement)
                durations = list(result.scalars().all())
        except _BACKEND_ERRORS as exc:
            raise StoreError("estimate", str(exc)) from exc
        if not durations:
            return None
        return round(sum(durations) / len(durations))

    async def _write(self, task: GeoprocessingTask, operation: str) -> None:
        row = OrmMapper.to_task_row(task)
        try:
            async with self._orm.session_factory() as session:
                async with session.begin():
                    await session.merge(row)
        except _BACKEND_ERRORS as exc:
            raise StoreError(operation, str(exc)) from exc
