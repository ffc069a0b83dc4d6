import pytest

from src.geoprocessing.domain.sketch import (
    is_geometry,
    is_sketch,
    is_sketch_collection,
    sketch_bbox,
    to_sketch_list,
)
from src.geoprocessing.functions.sketch_summary import sketch_summary
from tests.conftest import POLYGON_SKETCH

POINT_SKETCH = {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [-118.5, 33.0]}}
COLLECTION = {"type": "FeatureCollection", "features": [POLYGON_SKETCH, POINT_SKETCH]}


def test_feature_and_collection_are_recognized() -> None:
    assert is_sketch(POLYGON_SKETCH)
    assert not is_sketch(COLLECTION)
    assert is_sketch_collection(COLLECTION)
    assert not is_sketch_collection({"type": "FeatureCollection", "features": [{"type": "Point"}]})


def test_to_sketch_list_flattens_collections() -> None:
    assert to_sketch_list(POLYGON_SKETCH) == [POLYGON_SKETCH]
    assert to_sketch_list(COLLECTION) == [POLYGON_SKETCH, POINT_SKETCH]
    with pytest.raises(ValueError):
        to_sketch_list({"type": "Polygon", "coordinates": []})


def test_bbox_spans_every_position() -> None:
    assert sketch_bbox(POLYGON_SKETCH) == [-120.0, 34.0, -119.0, 35.0]
    assert sketch_bbox(COLLECTION) == [-120.0, 33.0, -118.5, 35.0]


def test_sketch_summary_function() -> None:
    assert sketch_summary(COLLECTION) == {
        "count": 2,
        "bbox": [-120.0, 33.0, -118.5, 35.0],
        "geometryTypes": ["Point", "Polygon"],
    }


def test_bare_geometries_are_recognized() -> None:
    assert is_geometry(POLYGON_SKETCH["geometry"])
    assert is_geometry({"type": "GeometryCollection", "geometries": []})
    assert not is_geometry({"type": "Polygon"})
    assert not is_geometry(POLYGON_SKETCH)
