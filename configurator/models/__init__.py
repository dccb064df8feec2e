import importlib

from configurator.models.attribute import ProductAttribute, ProductAttributeOption
from configurator.models.bom import (
    OptionBOMEntry,
    OptionBOMModifier,
    ProductBOMEntry,
    VariantBOMOverride,
)
from configurator.models.global_attribute import (
    GlobalAttribute,
    GlobalAttributeMetadataField,
    GlobalAttributeOption,
    ProductGlobalAttributeLink,
    ProductGlobalOptionSelection,
)
from configurator.models.product import Product
from configurator.models.production import ProductionBatch, ProductionBatchMaterial
from configurator.models.raw_material import RawMaterial, StockMovement
from configurator.models.variant import (
    ProductVariant,
    ProductVariantGlobalOption,
    ProductVariantOption,
)


def import_all_models() -> None:
    for module_name in (
        "configurator.models.attribute",
        "configurator.models.bom",
        "configurator.models.global_attribute",
        "configurator.models.product",
        "configurator.models.production",
        "configurator.models.raw_material",
        "configurator.models.variant",
    ):
        importlib.import_module(module_name)


__all__ = [
    "GlobalAttribute",
    "GlobalAttributeMetadataField",
    "GlobalAttributeOption",
    "OptionBOMEntry",
    "OptionBOMModifier",
    "Product",
    "ProductAttribute",
    "ProductAttributeOption",
    "ProductBOMEntry",
    "ProductGlobalAttributeLink",
    "ProductGlobalOptionSelection",
    "ProductVariant",
    "ProductVariantGlobalOption",
    "ProductVariantOption",
    "ProductionBatch",
    "ProductionBatchMaterial",
    "RawMaterial",
    "StockMovement",
    "VariantBOMOverride",
    "import_all_models",
]
