from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class GeoprocessingSettings(BaseSettings):
    """Runtime options consumed by the geoprocessing handler."""
    RUN_AS_SYNC: bool = False
    ASYNC_HANDLER_FUNCTION_NAME: str | None = None
    WSS_REF: str | None = None
    WSS_REGION: str | None = None
    WSS_STAGE: str | None = None
    GEOMETRY_FETCH_TIMEOUT_SEC: float = 30.0
    LOG_LEVEL: str = "INFO"
    HANDLER_MODULES: list[str] = ["src.geoprocessing.functions.sketch_summary"]

    model_config = ConfigDict(env_file=".env", extra="ignore")

    @property
    def socket_address(self) -> str:
        """Default notification socket built from the WSS_* components."""
        return (
            f"wss://{self.WSS_REF}.execute-api.{self.WSS_REGION}"
            f".amazonaws.com/{self.WSS_STAGE}"
        )


def get_geoprocessing_settings() -> GeoprocessingSettings:
    """Return a fresh geoprocessing settings instance."""
    return GeoprocessingSettings()
