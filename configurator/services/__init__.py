from configurator.services.axis_service import AxisService
from configurator.services.bom_service import BOMService
from configurator.services.catalog_service import CatalogService
from configurator.services.event_service import (
    EventPublisher,
    WebhookEventPublisher,
    build_event_publisher,
)
from configurator.services.global_attribute_service import GlobalAttributeService
from configurator.services.production_service import ProductionService
from configurator.services.raw_material_service import RawMaterialService
from configurator.services.variant_service import VariantService

__all__ = [
    "AxisService",
    "BOMService",
    "CatalogService",
    "EventPublisher",
    "GlobalAttributeService",
    "ProductionService",
    "RawMaterialService",
    "VariantService",
    "WebhookEventPublisher",
    "build_event_publisher",
]
