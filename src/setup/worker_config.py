from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class WorkerSettings(BaseSettings):
    """Broker connection and consumer options for the async worker."""
    REDIS_URL: str = "redis://redis:6379/0"
    ASYNC_HANDLER_QUEUE: str | None = None
    WORKER_CONCURRENCY: int = 2
    # Geoprocessing runs are long; one message in flight per process.
    WORKER_PREFETCH_MULTIPLIER: int = 1

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_worker_settings() -> WorkerSettings:
    """Return a fresh worker settings instance."""
    return WorkerSettings()
