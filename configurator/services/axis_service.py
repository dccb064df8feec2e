from sqlalchemy import select
from sqlalchemy.orm import selectinload

from configurator.core.axes import (
    Axis,
    AxisOption,
    OptionSelection,
    global_axis,
    order_axes,
    product_axis,
)
from configurator.core.metadata import metadata_decimal
from configurator.models.attribute import ProductAttribute
from configurator.models.global_attribute import GlobalAttribute, ProductGlobalAttributeLink
from configurator.services.base import Service


def _weight(value):
    return None if value is None else int(value)


class AxisService(Service):
    """Loads a product's attributes and global links as ordered axes."""

    def product_axes(self, product_id: int) -> list[Axis]:
        attributes = (
            self.db.execute(
                select(ProductAttribute)
                .where(ProductAttribute.product_id == product_id)
                .options(selectinload(ProductAttribute.options))
                .execution_options(populate_existing=True)
            )
            .scalars()
            .all()
        )
        axes = []
        for attribute in attributes:
            options = [
                AxisOption(
                    id=option.id,
                    value=option.value,
                    display_value=option.display_value,
                    position=option.position,
                    price_modifier=option.price_modifier,
                    weight_modifier=option.weight_modifier_grams,
                    is_active=option.is_active,
                )
                for option in attribute.options
            ]
            axes.append(
                product_axis(
                    attribute.id,
                    attribute.name,
                    attribute.display_name,
                    attribute.position,
                    options,
                )
            )
        return axes

    def global_axes(self, product_id: int) -> list[Axis]:
        links = (
            self.db.execute(
                select(ProductGlobalAttributeLink)
                .join(GlobalAttribute, GlobalAttribute.id == ProductGlobalAttributeLink.global_attribute_id)
                .where(
                    ProductGlobalAttributeLink.product_id == product_id,
                    GlobalAttribute.is_active.is_(True),
                )
                .options(
                    selectinload(ProductGlobalAttributeLink.global_attribute).selectinload(
                        GlobalAttribute.options
                    ),
                    selectinload(ProductGlobalAttributeLink.selections),
                )
                .execution_options(populate_existing=True)
            )
            .scalars()
            .all()
        )
        axes = []
        for link in links:
            options = []
            for option in link.global_attribute.options:
                metadata = option.option_metadata or {}
                options.append(
                    AxisOption(
                        id=option.id,
                        value=option.value,
                        display_value=option.display_value,
                        position=option.position,
                        price_modifier=metadata_decimal(metadata, link.price_modifier_field),
                        weight_modifier=_weight(metadata_decimal(metadata, link.weight_modifier_field)),
                        is_active=option.is_active,
                    )
                )
            selections = [
                OptionSelection(
                    option_id=selection.global_option_id,
                    price_modifier=selection.price_modifier,
                    weight_modifier=selection.weight_modifier_grams,
                    position_override=selection.position_override,
                )
                for selection in link.selections
            ]
            axes.append(
                global_axis(
                    link.id,
                    link.role_name,
                    link.role_display_name,
                    link.position,
                    options,
                    selections,
                )
            )
        return axes

    def resolve_all(self, product_id: int) -> tuple[list[Axis], list[Axis]]:
        """``(usable, empty)`` axes of a product, sorted by position."""
        return order_axes(self.product_axes(product_id) + self.global_axes(product_id))

    def resolve(self, product_id: int) -> list[Axis]:
        usable, _empty = self.resolve_all(product_id)
        return usable


__all__ = ["AxisService"]
