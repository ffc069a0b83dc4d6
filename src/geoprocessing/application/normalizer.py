from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from src.geoprocessing.domain.exceptions import MalformedRequestError
from src.geoprocessing.domain.models.request import GeoprocessingRequest


def parse_request(event: dict[str, Any]) -> GeoprocessingRequest:
    """
    Normalize an inbound trigger into a GeoprocessingRequest.

    Shapes are tried in order: a payload carrying ``geometry`` directly, query
    parameters carrying ``geometryUri``, then a JSON-encoded ``body``.
    """
    if not isinstance(event, dict):
        raise MalformedRequestError()

    if "geometry" in event:
        return _validate(event)

    params = event.get("queryStringParameters") or {}
    uri = params.get("geometryUri") or params.get("geometry_uri")
    if uri:
        return _validate(
            {
                "geometryUri": uri,
                "cacheKey": params.get("cacheKey") or params.get("cache_key"),
                "wss": params.get("wss"),
            }
        )

    body = event.get("body")
    if isinstance(body, str) and body:
        try:
            data = json.loads(body)
        except json.JSONDecodeError as exc:
            raise MalformedRequestError("Request body is not valid JSON") from exc
        if not isinstance(data, dict):
            raise MalformedRequestError("Request body must be a JSON object")
        return _validate(data)

    raise MalformedRequestError()


def _validate(data: dict[str, Any]) -> GeoprocessingRequest:
    try:
        return GeoprocessingRequest.model_validate(data)
    except ValidationError as exc:
        raise MalformedRequestError(f"Invalid geoprocessing request: {exc.errors()}") from exc
