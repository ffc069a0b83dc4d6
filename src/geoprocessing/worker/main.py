from src.geoprocessing.infrastructure.celery.app import celery_app
from src.setup.app_config import configure_di, load_handler_modules
from src.setup.geoprocessing_config import get_geoprocessing_settings
from src.setup.logging_config import configure_logging
from src.setup.worker_config import get_worker_settings


def main() -> None:
    log_level = get_geoprocessing_settings().LOG_LEVEL
    worker_settings = get_worker_settings()
    configure_logging(log_level)
    configure_di()
    load_handler_modules()
    # Registers the async worker task with the Celery app.
    import src.geoprocessing.worker.tasks  # noqa: F401

    argv = ["worker", "-l", log_level, "--concurrency", str(worker_settings.WORKER_CONCURRENCY)]
    if worker_settings.ASYNC_HANDLER_QUEUE:
        argv += ["-Q", worker_settings.ASYNC_HANDLER_QUEUE]
    celery_app.worker_main(argv)


if __name__ == "__main__":
    main()
