from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, HTTPException, Request, Response

from src.geoprocessing.application.handler import GeoprocessingHandler
from src.geoprocessing.application.registry import registry
from src.geoprocessing.domain.exceptions import (
    MalformedRequestError,
    StoreError,
    TaskNotFoundError,
)
from src.geoprocessing.domain.models import COMMON_HEADERS, InvocationContext
from src.setup.gateway_config import get_gateway_settings

router = APIRouter(tags=["geoprocessing"])
request_id_header = get_gateway_settings().REQUEST_ID_HEADER
logger = logging.getLogger(__name__)


def _handler_for(service: str) -> GeoprocessingHandler:
    try:
        return registry.handler_for(service)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown service {service!r}")  # noqa: B904


@router.get(
    "/",
    summary="List geoprocessing services",
)
def list_services() -> dict[str, list[dict[str, str]]]:
    services = []
    for name in registry.services():
        options = registry.handler_for(name).options
        services.append(
            {
                "title": options.title,
                "description": options.description,
                "executionMode": options.execution_mode.value,
            }
        )
    return {"services": services}


@router.get(
    "/{service}/tasks/{task_id}",
    summary="Read a task",
    description="Returns the stored task for the given service and task id (cache key).",
    responses={404: {"description": "Unknown service or task."}},
)
async def get_task(service: str, task_id: str) -> Response:
    handler = _handler_for(service)
    try:
        task = await handler.store.get(service, task_id)
        if task is None:
            raise TaskNotFoundError(service, task_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))  # noqa: B904
    except StoreError as exc:
        logger.error("Task store unavailable", extra={"service": service, "task_id": task_id})
        raise HTTPException(status_code=503, detail=str(exc))  # noqa: B904
    return Response(content=task.to_json(), status_code=200, headers=COMMON_HEADERS)


@router.api_route(
    "/{service}",
    methods=["GET", "POST"],
    summary="Run a geoprocessing service",
    description=(
        "Accepts `geometryUri`, `cacheKey` and `wss` query parameters, or a JSON body "
        "with `geometry` or `geometryUri`. Responds with the task: completed, pending "
        "(async services) or failed. Cached results carry the `x-gp-cache` header."
    ),
    responses={
        400: {"description": "The request could not be interpreted."},
        404: {"description": "Unknown service."},
        503: {"description": "The task store is unavailable."},
    },
)
async def run_service(service: str, request: Request) -> Response:
    handler = _handler_for(service)
    raw_body = await request.body()
    event = {
        "httpMethod": request.method,
        "path": request.url.path,
        "queryStringParameters": dict(request.query_params) or None,
        "body": raw_body.decode("utf-8") if raw_body else None,
    }
    context = InvocationContext(request_id=request.headers.get(request_id_header) or uuid4().hex)
    try:
        result = await handler.handle(event, context)
    except MalformedRequestError as exc:
        raise HTTPException(status_code=400, detail=str(exc))  # noqa: B904
    except StoreError as exc:
        logger.error("Task store unavailable", extra={"service": service})
        raise HTTPException(status_code=503, detail=str(exc))  # noqa: B904
    return Response(
        content=result.body,
        status_code=result.status_code,
        headers=result.headers,
    )
