from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GeoprocessingRequest(BaseModel):
    """Normalized trigger: exactly one geometry source plus optional cache/socket info."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    geometry: dict[str, Any] | None = Field(
        default=None, description="Inline GeoJSON Feature or FeatureCollection."
    )
    geometry_uri: str | None = Field(
        default=None, alias="geometryUri", description="URL of the input geometry."
    )
    cache_key: str | None = Field(default=None, alias="cacheKey")
    wss: str | None = Field(default=None, description="Notification socket override.")

    @model_validator(mode="after")
    def _one_geometry_source(self) -> "GeoprocessingRequest":
        if (self.geometry is None) == (self.geometry_uri is None):
            raise ValueError("exactly one of geometry or geometryUri is required")
        return self
