import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from configurator.config import Settings, get_settings
from configurator.core.errors import ConfiguratorError
from configurator.core.logging import setup_logging
from configurator.database import Base, engine
from configurator.models import import_all_models
from configurator.routers import (
    bom_router,
    global_attributes_router,
    health_router,
    production_router,
    products_router,
    raw_materials_router,
)
from configurator.services.event_service import build_event_publisher

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)

import_all_models()
Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME)
app.state.events = build_event_publisher(settings)


@app.exception_handler(ConfiguratorError)
async def configurator_error_handler(_request: Request, exc: ConfiguratorError):
    if exc.status_code >= 409:
        logger.warning("%s: %s", type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


app.include_router(health_router)
app.include_router(products_router)
app.include_router(global_attributes_router)
app.include_router(bom_router)
app.include_router(raw_materials_router)
app.include_router(production_router)


__all__ = ["app"]
