from dataclasses import dataclass

from src.geoprocessing.domain.models.task import GeoprocessingTask


@dataclass(frozen=True)
class InvocationContext:
    """Platform facts about one handler invocation."""

    request_id: str | None
    # Set when an async worker re-enters with the task created by the entry call.
    task: GeoprocessingTask | None = None
