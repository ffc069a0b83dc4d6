import asyncio
import logging
from typing import Any

import inject

from src.geoprocessing.application.registry import registry
from src.geoprocessing.domain.models import GeoprocessingTask, InvocationContext
from src.geoprocessing.infrastructure.celery.app import celery_app
from src.geoprocessing.infrastructure.postgres.orm import PostgresOrm

logger = logging.getLogger(__name__)

ASYNC_WORKER_TASK = "geoprocessing.async_worker"


async def _run(payload: dict[str, Any], context: InvocationContext) -> dict[str, Any]:
    handler = registry.handler_for(payload["service"])
    try:
        response = await handler.handle(payload["event"], context, force_sync=True)
    finally:
        # Each Celery task runs on a fresh event loop; pooled connections cannot outlive it.
        if inject.is_configured():
            await inject.instance(PostgresOrm).dispose()
    return response.model_dump()


@celery_app.task(name=ASYNC_WORKER_TASK, bind=True)
def async_worker(self, payload: dict, task: dict | None = None) -> dict:
    """
    Async half of a geoprocessing service.
    Re-enters the service's handler in sync mode with the task the entry call created.
    """
    context = InvocationContext(
        request_id=self.request.id,
        task=GeoprocessingTask.model_validate(task) if task else None,
    )
    logger.info(
        "Async worker started",
        extra={"service": payload.get("service"), "request_id": self.request.id},
    )
    return asyncio.run(_run(payload, context))
