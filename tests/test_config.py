from src.setup.geoprocessing_config import GeoprocessingSettings
from src.setup.store_config import TaskStoreSettings
from src.setup.worker_config import WorkerSettings


def test_socket_address_is_built_from_parts() -> None:
    settings = GeoprocessingSettings(
        _env_file=None, WSS_REF="abc123", WSS_REGION="us-west-1", WSS_STAGE="prod"
    )

    assert settings.socket_address == "wss://abc123.execute-api.us-west-1.amazonaws.com/prod"


def test_environment_overrides_defaults(monkeypatch) -> None:
    monkeypatch.setenv("RUN_AS_SYNC", "true")
    monkeypatch.setenv("ASYNC_HANDLER_FUNCTION_NAME", "gp-worker")

    settings = GeoprocessingSettings(_env_file=None)

    assert settings.RUN_AS_SYNC is True
    assert settings.ASYNC_HANDLER_FUNCTION_NAME == "gp-worker"
    assert settings.GEOMETRY_FETCH_TIMEOUT_SEC == 30.0


def test_store_and_worker_defaults() -> None:
    store = TaskStoreSettings(_env_file=None)
    worker = WorkerSettings(_env_file=None)

    assert store.TASKS_TABLE == "gp_tasks"
    assert store.ESTIMATE_SAMPLE_SIZE == 10
    assert worker.ASYNC_HANDLER_QUEUE is None
