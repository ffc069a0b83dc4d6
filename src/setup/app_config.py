import importlib
import logging

import inject

from src.geoprocessing.domain.repositories import (
    AsyncWorkerInvoker,
    GeometryResolver,
    TaskStore,
)
from src.geoprocessing.infrastructure.celery.repositories import CeleryWorkerInvoker
from src.geoprocessing.infrastructure.http.geometry import HttpGeometryResolver
from src.geoprocessing.infrastructure.postgres.orm import PostgresOrm
from src.geoprocessing.infrastructure.postgres.repositories import PostgresTaskStore
from src.setup.geoprocessing_config import get_geoprocessing_settings
from src.setup.store_config import get_task_store_settings
from src.setup.worker_config import get_worker_settings

logger = logging.getLogger(__name__)


def _bindings(binder: inject.Binder) -> None:
    store_settings = get_task_store_settings()
    orm = PostgresOrm(store_settings.DATABASE_URL, echo=store_settings.DATABASE_ECHO)
    binder.bind(PostgresOrm, orm)
    binder.bind(
        TaskStore,
        PostgresTaskStore(orm, estimate_sample_size=store_settings.ESTIMATE_SAMPLE_SIZE),
    )
    binder.bind(
        GeometryResolver,
        HttpGeometryResolver(
            timeout_seconds=get_geoprocessing_settings().GEOMETRY_FETCH_TIMEOUT_SEC
        ),
    )
    binder.bind(
        AsyncWorkerInvoker,
        CeleryWorkerInvoker(queue=get_worker_settings().ASYNC_HANDLER_QUEUE),
    )


def configure_di() -> None:
    """Configure the process-wide injector once."""
    if inject.is_configured():
        return
    inject.configure(_bindings)


def load_handler_modules() -> list[str]:
    """Import the modules listed in HANDLER_MODULES so their handlers register."""
    modules = get_geoprocessing_settings().HANDLER_MODULES
    for name in modules:
        importlib.import_module(name)
        logger.info("Loaded geoprocessing module", extra={"module": name})
    return modules
