from __future__ import annotations

import asyncio
from typing import Any

from celery.exceptions import CeleryError
from kombu.exceptions import KombuError

from src.geoprocessing.domain.exceptions import DispatchError
from src.geoprocessing.domain.models.task import GeoprocessingTask
from src.geoprocessing.domain.repositories import AsyncWorkerInvoker
from src.geoprocessing.infrastructure.celery.app import celery_app


class CeleryWorkerInvoker(AsyncWorkerInvoker):
    """
    Fire-and-forget hand-off of a trigger to the async worker through the broker.
    """

    def __init__(self, celery_app_instance=celery_app, queue: str | None = None) -> None:
        self._celery_app = celery_app_instance
        self._queue = queue

    async def invoke(
        self,
        worker_name: str,
        payload: dict[str, Any],
        task: GeoprocessingTask,
    ) -> None:
        """
        Publish the worker message; returns once the broker accepted it.
        """
        try:
            await asyncio.to_thread(
                self._celery_app.send_task,
                worker_name,
                args=[payload],
                kwargs={"task": task.model_dump(mode="json", by_alias=True)},
                queue=self._queue,
                ignore_result=True,
            )
        except (CeleryError, KombuError, OSError) as exc:
            raise DispatchError(worker_name, str(exc)) from exc
