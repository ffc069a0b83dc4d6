from src.geoprocessing.domain.models.invocation import InvocationContext
from src.geoprocessing.domain.models.request import GeoprocessingRequest
from src.geoprocessing.domain.models.response import (
    CACHE_HEADER,
    CACHE_HIT,
    COMMON_HEADERS,
    HandlerResponse,
)
from src.geoprocessing.domain.models.task import GeoprocessingTask
from src.geoprocessing.domain.models.task_status import GeoprocessingTaskStatus

__all__ = [
    "GeoprocessingTask",
    "GeoprocessingTaskStatus",
    "GeoprocessingRequest",
    "InvocationContext",
    "HandlerResponse",
    "COMMON_HEADERS",
    "CACHE_HEADER",
    "CACHE_HIT",
]
