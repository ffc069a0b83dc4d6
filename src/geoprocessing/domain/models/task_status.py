from enum import Enum


class GeoprocessingTaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not GeoprocessingTaskStatus.PENDING
