from __future__ import annotations

import asyncio
import copy
import inspect
import logging
import os
import traceback
from collections.abc import Callable
from functools import partial
from typing import Any

import inject
from pydantic import TypeAdapter

from src.geoprocessing.application.guard import InvocationGuard
from src.geoprocessing.application.normalizer import parse_request
from src.geoprocessing.application.supervisor import FaultSupervisor
from src.geoprocessing.domain.exceptions import (
    ComputationFault,
    DispatchError,
    GeometryResolutionError,
    UncaughtFault,
)
from src.geoprocessing.domain.models import (
    CACHE_HEADER,
    CACHE_HIT,
    COMMON_HEADERS,
    GeoprocessingRequest,
    GeoprocessingTask,
    GeoprocessingTaskStatus,
    HandlerResponse,
    InvocationContext,
)
from src.geoprocessing.domain.models.options import ExecutionMode, GeoprocessingHandlerOptions
from src.geoprocessing.domain.repositories import AsyncWorkerInvoker, GeometryResolver, TaskStore
from src.setup.geoprocessing_config import GeoprocessingSettings, get_geoprocessing_settings

logger = logging.getLogger(__name__)

GeoprocessingFunction = Callable[[dict[str, Any]], Any]

_jsonable = TypeAdapter(Any)


def _terminate() -> None:
    os._exit(1)


class GeoprocessingHandler:
    """
    Runs a geoprocessing function as a cacheable task.

    One invocation walks a single state machine: replay check, cache check,
    task creation, then either running the function here or handing the task
    to the async worker. Every path that gets past task creation ends with a
    ``HandlerResponse`` describing the task; only malformed triggers and task
    store failures raise.
    """

    def __init__(
        self,
        func: GeoprocessingFunction,
        options: GeoprocessingHandlerOptions,
        *,
        store: TaskStore | None = None,
        resolver: GeometryResolver | None = None,
        invoker: AsyncWorkerInvoker | None = None,
        guard: InvocationGuard | None = None,
        settings: GeoprocessingSettings | None = None,
        exit_process: Callable[[], None] = _terminate,
    ) -> None:
        self.func = func
        self.options = options
        self._store = store
        self._resolver = resolver
        self._invoker = invoker
        self._guard = guard or InvocationGuard()
        self._settings = settings
        self._exit_process = exit_process

    @property
    def service_name(self) -> str:
        return self.options.title

    @property
    def store(self) -> TaskStore:
        if self._store is None:
            self._store = inject.instance(TaskStore)
        return self._store

    @property
    def resolver(self) -> GeometryResolver:
        if self._resolver is None:
            self._resolver = inject.instance(GeometryResolver)
        return self._resolver

    @property
    def invoker(self) -> AsyncWorkerInvoker:
        if self._invoker is None:
            self._invoker = inject.instance(AsyncWorkerInvoker)
        return self._invoker

    @property
    def settings(self) -> GeoprocessingSettings:
        if self._settings is None:
            self._settings = get_geoprocessing_settings()
        return self._settings

    async def handle(
        self,
        event: dict[str, Any],
        context: InvocationContext,
        *,
        force_sync: bool | None = None,
    ) -> HandlerResponse:
        """Handle one trigger. ``force_sync`` overrides the RUN_AS_SYNC setting."""
        service = self.service_name
        request = parse_request(event)

        if self._guard.is_replay(context.request_id):
            logger.info(
                "Cancelling since invocation is being replayed",
                extra={"service": service, "request_id": context.request_id},
            )
            return HandlerResponse(status_code=200, body="")

        run_as_sync = self.settings.RUN_AS_SYNC if force_sync is None else force_sync

        if not run_as_sync and request.cache_key:
            cached = await self.store.get(service, request.cache_key)
            if cached is not None and cached.status is not GeoprocessingTaskStatus.FAILED:
                logger.info(
                    "Serving task from cache",
                    extra={"service": service, "task_id": cached.id},
                )
                return self._respond(cached, headers={CACHE_HEADER: CACHE_HIT})

        wss = self._socket_for(request)
        if context.task is not None:
            task = context.task
        else:
            task = await self.store.create(
                service,
                request.cache_key,
                context.request_id,
                wss,
                geometry_uri=request.geometry_uri,
            )
        logger.info(
            "Task accepted",
            extra={"service": service, "task_id": task.id, "request_id": context.request_id},
        )

        if run_as_sync or self.options.execution_mode is ExecutionMode.SYNC:
            return await self._run_sync(request, task)
        return await self._dispatch_async(event, task, wss)

    async def _run_sync(
        self, request: GeoprocessingRequest, task: GeoprocessingTask
    ) -> HandlerResponse:
        async with FaultSupervisor(
            on_fault=partial(self._record_fault, task),
            exit_process=self._exit_process,
        ) as supervisor:
            finished = await self._compute(request, task, supervisor)
        return self._respond(finished)

    async def _compute(
        self,
        request: GeoprocessingRequest,
        task: GeoprocessingTask,
        supervisor: FaultSupervisor,
    ) -> GeoprocessingTask:
        try:
            feature_set = await self.resolver.resolve(request)
        except Exception as exc:
            error = exc if isinstance(exc, GeometryResolutionError) else GeometryResolutionError(
                request.geometry_uri, str(exc)
            )
            return await self.store.fail(task, str(error), exc)

        try:
            results = await self._call(feature_set)
            data = _jsonable.dump_python(results, mode="json")
        except Exception as exc:
            fault = ComputationFault(exc, traceback.format_exc())
            return await self.store.fail(task, str(fault), exc)

        if supervisor.faulted:
            return await supervisor.settle()
        return await self.store.complete(task, data)

    async def _call(self, feature_set: dict[str, Any]) -> Any:
        if inspect.iscoroutinefunction(self.func):
            return await self.func(feature_set)
        results = await asyncio.to_thread(self.func, feature_set)
        if inspect.isawaitable(results):
            results = await results
        return results

    async def _record_fault(
        self, task: GeoprocessingTask, fault: UncaughtFault
    ) -> GeoprocessingTask:
        return await self.store.fail(task, str(fault), fault.cause)

    async def _dispatch_async(
        self, event: dict[str, Any], task: GeoprocessingTask, wss: str | None
    ) -> HandlerResponse:
        worker_name = self.settings.ASYNC_HANDLER_FUNCTION_NAME
        if not worker_name:
            failed = await self.store.fail(task, "No async handler function name defined")
            return self._respond(failed)

        forwarded = copy.deepcopy(event)
        params = forwarded.get("queryStringParameters")
        if params:
            params["wss"] = wss
        payload = {"service": self.service_name, "event": forwarded}

        try:
            await self.invoker.invoke(worker_name, payload, task)
        except DispatchError as exc:
            message = f"Could not launch async handler function: {exc} :: uri... {worker_name}"
            failed = await self.store.fail(task, message, exc)
            return self._respond(failed)

        logger.info(
            "Launched async worker",
            extra={"service": self.service_name, "task_id": task.id, "worker": worker_name},
        )
        return self._respond(task)

    def _socket_for(self, request: GeoprocessingRequest) -> str | None:
        if request.wss:
            return request.wss
        if self.settings.WSS_REF:
            return self.settings.socket_address
        return None

    @staticmethod
    def _respond(
        task: GeoprocessingTask, headers: dict[str, str] | None = None
    ) -> HandlerResponse:
        status_code = 500 if task.status is GeoprocessingTaskStatus.FAILED else 200
        return HandlerResponse(
            status_code=status_code,
            headers={**COMMON_HEADERS, **(headers or {})},
            body=task.to_json(),
        )
