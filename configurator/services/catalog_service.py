from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select

from configurator.core.constants import ATTRIBUTE_TYPES
from configurator.core.errors import ConfiguratorError
from configurator.models.attribute import ProductAttribute, ProductAttributeOption
from configurator.models.product import Product
from configurator.services.base import Service


class CatalogService(Service):
    """Products and their product-specific attributes and options."""

    def create_product(
        self,
        name: str,
        *,
        sku_prefix: Optional[str] = None,
        base_price=Decimal("0"),
        base_weight_grams: int = 0,
    ) -> Product:
        name = (name or "").strip()
        if not name:
            raise ConfiguratorError("Product name is required.")
        product = Product(
            name=name,
            sku_prefix=(sku_prefix or "").strip() or None,
            base_price=Decimal(str(base_price)),
            base_weight_grams=int(base_weight_grams),
        )
        self.db.add(product)
        self._commit("Product could not be created.")
        self.db.refresh(product)
        self.logger.info("Product %s created (%s).", product.id, product.name)
        return product

    def get_product(self, product_id: int) -> Product:
        return self._get(Product, product_id, "Product")

    def list_attributes(self, product_id: int) -> list[ProductAttribute]:
        self.get_product(product_id)
        return list(
            self.db.execute(
                select(ProductAttribute)
                .where(ProductAttribute.product_id == product_id)
                .order_by(ProductAttribute.position, ProductAttribute.id)
            )
            .scalars()
            .all()
        )

    def create_attribute(
        self,
        product_id: int,
        name: str,
        *,
        display_name: Optional[str] = None,
        attribute_type: str = "select",
        position: Optional[int] = None,
        affects_pricing: bool = False,
        affects_shipping: bool = False,
    ) -> ProductAttribute:
        self.get_product(product_id)
        name = (name or "").strip()
        if not name:
            raise ConfiguratorError("Attribute name is required.")
        if attribute_type not in ATTRIBUTE_TYPES:
            raise ConfiguratorError("Unknown attribute type {}.".format(attribute_type))
        if position is None:
            position = self._next_attribute_position(product_id)

        attribute = ProductAttribute(
            product_id=product_id,
            name=name,
            display_name=(display_name or name).strip(),
            attribute_type=attribute_type,
            position=position,
            affects_pricing=affects_pricing,
            affects_shipping=affects_shipping,
        )
        self.db.add(attribute)
        self._commit("Product {} already has an attribute named '{}'.".format(product_id, name))
        self.db.refresh(attribute)
        self.logger.info("Attribute %s (%s) added to product %s.", attribute.id, name, product_id)
        return attribute

    def add_option(
        self,
        attribute_id: int,
        value: str,
        *,
        display_value: Optional[str] = None,
        price_modifier=None,
        weight_modifier_grams: Optional[int] = None,
        position: Optional[int] = None,
        is_active: bool = True,
        color_hex: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> ProductAttributeOption:
        attribute = self._get(ProductAttribute, attribute_id, "Attribute")
        value = (value or "").strip()
        if not value:
            raise ConfiguratorError("Option value is required.")
        if position is None:
            position = self.db.execute(
                select(func.count(ProductAttributeOption.id)).where(
                    ProductAttributeOption.attribute_id == attribute_id
                )
            ).scalar()

        option = ProductAttributeOption(
            attribute_id=attribute_id,
            value=value,
            display_value=(display_value or value).strip(),
            price_modifier=Decimal(str(price_modifier)) if price_modifier is not None else None,
            weight_modifier_grams=weight_modifier_grams,
            position=position,
            is_active=is_active,
            color_hex=color_hex,
            image_url=image_url,
        )
        self.db.add(option)
        self._commit("Attribute {} already has an option '{}'.".format(attribute_id, value))
        self.db.refresh(option)
        self.db.expire(attribute, ["options"])
        self.logger.info("Option %s (%s) added to attribute %s.", option.id, value, attribute_id)
        return option

    def set_option_active(self, option_id: int, is_active: bool) -> ProductAttributeOption:
        option = self._get(ProductAttributeOption, option_id, "Option")
        option.is_active = is_active
        self.db.commit()
        self.logger.info("Option %s is_active=%s.", option_id, is_active)
        return option

    def _next_attribute_position(self, product_id: int) -> int:
        current = self.db.execute(
            select(func.max(ProductAttribute.position)).where(
                ProductAttribute.product_id == product_id
            )
        ).scalar()
        return 0 if current is None else current + 1


__all__ = ["CatalogService"]
