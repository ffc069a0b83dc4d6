from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.geoprocessing.domain.models.task_status import GeoprocessingTaskStatus


class GeoprocessingTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Cache key, or a generated id when caching is off.")
    service: str = Field(description="Name of the geoprocessing service.")
    location: str = Field(description="Gateway path where the task can be read back.")
    status: GeoprocessingTaskStatus = Field(description="Lifecycle status.")
    request_id: str | None = Field(
        default=None,
        alias="requestId",
        description="Identity of the invocation that created the task.",
    )
    wss: str | None = Field(default=None, description="Notification socket address.")
    geometry_uri: str | None = Field(
        default=None, alias="geometryUri", description="Referenced input geometry."
    )
    data: Any | None = Field(default=None, description="Result, once completed.")
    error: str | None = Field(default=None, description="Failure message, once failed.")
    started_at: datetime = Field(alias="startedAt", description="Creation time.")
    updated_at: datetime | None = Field(
        default=None, alias="updatedAt", description="Time of the last transition."
    )
    duration: int | None = Field(
        default=None, description="Milliseconds from creation to the terminal status."
    )
    estimate: int | None = Field(
        default=None, description="Expected duration in ms from recent completed runs."
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
