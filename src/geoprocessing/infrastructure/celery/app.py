from celery import Celery

from src.setup.worker_config import get_worker_settings

_settings = get_worker_settings()

celery_app = Celery(
    "geoprocessing",
    broker=_settings.REDIS_URL,
)

# Triggers are fire-and-forget; task state lives in the task store, not the result backend.
celery_app.conf.update(
    task_ignore_result=True,
    task_serializer="json",
    accept_content=["json"],
    worker_prefetch_multiplier=_settings.WORKER_PREFETCH_MULTIPLIER,
)
