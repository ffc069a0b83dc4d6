"""Resolve the geometry a geoprocessing request refers to."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.geoprocessing.domain.exceptions import GeometryResolutionError
from src.geoprocessing.domain.models.request import GeoprocessingRequest
from src.geoprocessing.domain.repositories import GeometryResolver
from src.geoprocessing.domain.sketch import is_geometry, is_sketch, is_sketch_collection, to_sketch

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpGeometryResolver(GeometryResolver):
    """
    Returns inline geometry, or downloads it from ``geometry_uri``.
    Bare geometry objects are wrapped in a Feature.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self._transport = transport

    async def resolve(self, request: GeoprocessingRequest) -> dict[str, Any]:
        if request.geometry is not None:
            return self._validated(request.geometry, None)

        uri = request.geometry_uri
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(uri)
        except httpx.HTTPError as exc:
            logger.warning("HTTP error fetching %s: %s", uri, exc)
            raise GeometryResolutionError(uri, str(exc)) from exc

        if not response.is_success:
            raise GeometryResolutionError(uri, f"HTTP {response.status_code}")
        try:
            data = response.json()
        except ValueError as exc:
            raise GeometryResolutionError(uri, "response is not valid JSON") from exc
        return self._validated(data, uri)

    @staticmethod
    def _validated(data: Any, uri: str | None) -> dict[str, Any]:
        if is_geometry(data):
            return to_sketch(data)
        if is_sketch(data) or is_sketch_collection(data):
            return data
        raise GeometryResolutionError(uri, "expected GeoJSON geometry or features")
