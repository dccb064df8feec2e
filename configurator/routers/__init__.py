from configurator.routers.bom import router as bom_router
from configurator.routers.global_attributes import router as global_attributes_router
from configurator.routers.health import router as health_router
from configurator.routers.production import router as production_router
from configurator.routers.products import router as products_router
from configurator.routers.raw_materials import router as raw_materials_router

__all__ = [
    "bom_router",
    "global_attributes_router",
    "health_router",
    "production_router",
    "products_router",
    "raw_materials_router",
]
