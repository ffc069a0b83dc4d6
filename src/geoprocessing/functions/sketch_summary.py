"""Small geoprocessing function: counts the sketches in the input and measures their extent."""

from typing import Any

from src.geoprocessing.application.handler import GeoprocessingHandler
from src.geoprocessing.application.registry import registry
from src.geoprocessing.domain.models.options import ExecutionMode, GeoprocessingHandlerOptions
from src.geoprocessing.domain.sketch import sketch_bbox, to_sketch_list


def sketch_summary(feature_set: dict[str, Any]) -> dict[str, Any]:
    sketches = to_sketch_list(feature_set)
    return {
        "count": len(sketches),
        "bbox": sketch_bbox(feature_set),
        "geometryTypes": sorted({sketch["geometry"].get("type") for sketch in sketches}),
    }


handler = registry.register(
    GeoprocessingHandler(
        sketch_summary,
        GeoprocessingHandlerOptions(
            title="sketchSummary",
            description="Counts sketches and reports their bounding box",
            execution_mode=ExecutionMode.SYNC,
        ),
    )
)
