"""Helpers for GeoJSON sketches (Features) and sketch collections (FeatureCollections)."""

from __future__ import annotations

from typing import Any

Sketch = dict[str, Any]

GEOMETRY_TYPES = frozenset(
    {
        "Point",
        "MultiPoint",
        "LineString",
        "MultiLineString",
        "Polygon",
        "MultiPolygon",
        "GeometryCollection",
    }
)


def is_geometry(value: Any) -> bool:
    """True for a bare GeoJSON geometry object (not wrapped in a Feature)."""
    if not isinstance(value, dict) or value.get("type") not in GEOMETRY_TYPES:
        return False
    if value["type"] == "GeometryCollection":
        return isinstance(value.get("geometries"), list)
    return isinstance(value.get("coordinates"), list)


def to_sketch(geometry: dict[str, Any]) -> Sketch:
    return {"type": "Feature", "properties": {}, "geometry": geometry}


def is_sketch(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and value.get("type") == "Feature"
        and isinstance(value.get("geometry"), dict)
    )


def is_sketch_collection(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and value.get("type") == "FeatureCollection"
        and isinstance(value.get("features"), list)
        and all(is_sketch(feature) for feature in value["features"])
    )


def to_sketch_list(value: Any) -> list[Sketch]:
    """Return the sketches of a Feature or FeatureCollection as a list."""
    if is_sketch(value):
        return [value]
    if is_sketch_collection(value):
        return list(value["features"])
    raise ValueError("invalid input, must be a Sketch or SketchCollection")


def sketch_bbox(value: Any) -> list[float] | None:
    """Bounding box [minx, miny, maxx, maxy] over all coordinates, or None when empty."""
    xs: list[float] = []
    ys: list[float] = []
    for sketch in to_sketch_list(value):
        for x, y in _positions(sketch["geometry"].get("coordinates")):
            xs.append(x)
            ys.append(y)
    if not xs:
        return None
    return [min(xs), min(ys), max(xs), max(ys)]


def _positions(coordinates: Any):
    if not isinstance(coordinates, list) or not coordinates:
        return
    if isinstance(coordinates[0], (int, float)):
        yield float(coordinates[0]), float(coordinates[1])
        return
    for item in coordinates:
        yield from _positions(item)
