from __future__ import annotations

from datetime import UTC

from src.geoprocessing.domain.models.task import GeoprocessingTask
from src.geoprocessing.infrastructure.postgres.orm import GeoprocessingTaskRow


class OrmMapper:
    @staticmethod
    def to_task_row(task: GeoprocessingTask) -> GeoprocessingTaskRow:
        return GeoprocessingTaskRow(
            service=task.service,
            id=task.id,
            location=task.location,
            status=task.status,
            request_id=task.request_id,
            wss=task.wss,
            geometry_uri=task.geometry_uri,
            data=task.data,
            error=task.error,
            started_at=task.started_at,
            updated_at=task.updated_at,
            duration=task.duration,
            estimate=task.estimate,
        )

    @staticmethod
    def to_domain_task(row: GeoprocessingTaskRow) -> GeoprocessingTask:
        return GeoprocessingTask(
            id=row.id,
            service=row.service,
            location=row.location,
            status=row.status,
            request_id=row.request_id,
            wss=row.wss,
            geometry_uri=row.geometry_uri,
            data=row.data,
            error=row.error,
            started_at=OrmMapper._aware(row.started_at),
            updated_at=OrmMapper._aware(row.updated_at) if row.updated_at else None,
            duration=row.duration,
            estimate=row.estimate,
        )

    @staticmethod
    def _aware(value):
        # Some backends (SQLite) hand back naive datetimes even for timezone columns.
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value
