from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class GatewaySettings(BaseSettings):
    APP_NAME: str = "geoprocessing-gateway"
    APP_VERSION: str = "0.1.0"
    REQUEST_ID_HEADER: str = "x-request-id"

    model_config = ConfigDict(env_file=".env", extra="ignore")


def get_gateway_settings() -> GatewaySettings:
    return GatewaySettings()
