from fastapi import FastAPI

from src.setup.gateway_config import get_gateway_settings
from src.setup.app_config import configure_di, load_handler_modules
from src.setup.geoprocessing_config import get_geoprocessing_settings
from src.setup.logging_config import configure_logging

settings = get_gateway_settings()
configure_logging(get_geoprocessing_settings().LOG_LEVEL)
configure_di()
load_handler_modules()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Geoprocessing gateway: cached, sync or async task execution",
)

from src.geoprocessing.presentation.routes import router as api_router  # noqa: E402

app.include_router(api_router, prefix="")
