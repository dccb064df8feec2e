from decimal import Decimal
from typing import Iterable, Mapping, Optional

from sqlalchemy import delete, func, select

from configurator.core.axes import OptionSelection
from configurator.core.constants import ATTRIBUTE_TYPES, METADATA_FIELD_TYPES
from configurator.core.errors import ConfiguratorError, InvalidMetadata
from configurator.core.metadata import MetadataField, validate_metadata
from configurator.models.global_attribute import (
    GlobalAttribute,
    GlobalAttributeMetadataField,
    GlobalAttributeOption,
    ProductGlobalAttributeLink,
    ProductGlobalOptionSelection,
)
from configurator.models.product import Product
from configurator.services.base import Service


def _field_definition(row: GlobalAttributeMetadataField) -> MetadataField:
    return MetadataField(
        field_name=row.field_name,
        field_type=row.field_type,
        is_required=row.is_required,
        default_value=row.default_value,
        select_options=tuple(row.select_options or ()),
    )


class GlobalAttributeService(Service):
    """Store-wide attributes shared by many products, and the per-product links to them."""

    # ------------------------------------------------------------------
    # Global attributes and metadata fields
    # ------------------------------------------------------------------

    def create_attribute(
        self,
        name: str,
        *,
        display_name: Optional[str] = None,
        attribute_type: str = "select",
        category: Optional[str] = None,
        description: Optional[str] = None,
        position: int = 0,
        is_active: bool = True,
    ) -> GlobalAttribute:
        name = (name or "").strip()
        if not name:
            raise ConfiguratorError("Global attribute name is required.")
        if attribute_type not in ATTRIBUTE_TYPES:
            raise ConfiguratorError("Unknown attribute type {}.".format(attribute_type))
        attribute = GlobalAttribute(
            name=name,
            display_name=(display_name or name).strip(),
            attribute_type=attribute_type,
            category=category,
            description=description,
            position=position,
            is_active=is_active,
        )
        self.db.add(attribute)
        self._commit("A global attribute named '{}' already exists.".format(name))
        self.db.refresh(attribute)
        self.logger.info("Global attribute %s (%s) created.", attribute.id, name)
        return attribute

    def get_attribute(self, global_attribute_id: int) -> GlobalAttribute:
        return self._get(GlobalAttribute, global_attribute_id, "Global attribute")

    def add_metadata_field(
        self,
        global_attribute_id: int,
        field_name: str,
        *,
        display_name: Optional[str] = None,
        field_type: str = "text",
        is_required: bool = False,
        default_value: Optional[str] = None,
        select_options: Iterable[str] = (),
        help_text: Optional[str] = None,
        position: int = 0,
    ) -> GlobalAttributeMetadataField:
        self.get_attribute(global_attribute_id)
        field_name = (field_name or "").strip()
        if not field_name:
            raise InvalidMetadata("Metadata field name is required.")
        if field_type not in METADATA_FIELD_TYPES:
            raise InvalidMetadata("Unknown metadata field type {}.".format(field_type))
        select_options = [str(value) for value in select_options]
        if field_type == "select" and not select_options:
            raise InvalidMetadata("Select field {} needs at least one option.".format(field_name))
        if default_value is not None:
            definition = MetadataField(field_name, field_type, select_options=tuple(select_options))
            default_value = str(validate_metadata([definition], {field_name: default_value})[field_name])

        row = GlobalAttributeMetadataField(
            global_attribute_id=global_attribute_id,
            field_name=field_name,
            display_name=(display_name or field_name).strip(),
            field_type=field_type,
            is_required=is_required,
            default_value=default_value,
            select_options=select_options,
            help_text=help_text,
            position=position,
        )
        self.db.add(row)
        self._commit("Metadata field '{}' already exists.".format(field_name))
        self.db.refresh(row)
        return row

    def metadata_fields(self, global_attribute_id: int) -> list[MetadataField]:
        rows = (
            self.db.execute(
                select(GlobalAttributeMetadataField)
                .where(GlobalAttributeMetadataField.global_attribute_id == global_attribute_id)
                .order_by(GlobalAttributeMetadataField.position, GlobalAttributeMetadataField.id)
            )
            .scalars()
            .all()
        )
        return [_field_definition(row) for row in rows]

    # ------------------------------------------------------------------
    # Global options
    # ------------------------------------------------------------------

    def add_option(
        self,
        global_attribute_id: int,
        value: str,
        *,
        display_value: Optional[str] = None,
        metadata: Optional[Mapping] = None,
        position: Optional[int] = None,
        is_active: bool = True,
        color_hex: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> GlobalAttributeOption:
        attribute = self.get_attribute(global_attribute_id)
        value = (value or "").strip()
        if not value:
            raise ConfiguratorError("Option value is required.")
        clean_metadata = validate_metadata(self.metadata_fields(global_attribute_id), metadata)
        if position is None:
            position = self.db.execute(
                select(func.count(GlobalAttributeOption.id)).where(
                    GlobalAttributeOption.global_attribute_id == global_attribute_id
                )
            ).scalar()

        option = GlobalAttributeOption(
            global_attribute_id=global_attribute_id,
            value=value,
            display_value=(display_value or value).strip(),
            option_metadata=clean_metadata,
            position=position,
            is_active=is_active,
            color_hex=color_hex,
            image_url=image_url,
        )
        self.db.add(option)
        self._commit("Global attribute {} already has an option '{}'.".format(global_attribute_id, value))
        self.db.refresh(option)
        self.db.expire(attribute, ["options"])
        self.logger.info("Global option %s (%s) added to %s.", option.id, value, global_attribute_id)
        return option

    def update_option_metadata(self, option_id: int, metadata: Optional[Mapping]) -> GlobalAttributeOption:
        option = self._get(GlobalAttributeOption, option_id, "Global option")
        option.option_metadata = validate_metadata(
            self.metadata_fields(option.global_attribute_id), metadata
        )
        self.db.commit()
        return option

    def set_option_active(self, option_id: int, is_active: bool) -> GlobalAttributeOption:
        option = self._get(GlobalAttributeOption, option_id, "Global option")
        option.is_active = is_active
        self.db.commit()
        self.logger.info("Global option %s is_active=%s.", option_id, is_active)
        return option

    # ------------------------------------------------------------------
    # Product links and option selections
    # ------------------------------------------------------------------

    def link_to_product(
        self,
        product_id: int,
        global_attribute_id: int,
        role_name: str,
        *,
        role_display_name: Optional[str] = None,
        position: int = 0,
        affects_pricing: bool = False,
        affects_shipping: bool = False,
        price_modifier_field: Optional[str] = None,
        weight_modifier_field: Optional[str] = None,
    ) -> ProductGlobalAttributeLink:
        self._get(Product, product_id, "Product")
        self.get_attribute(global_attribute_id)
        role_name = (role_name or "").strip()
        if not role_name:
            raise ConfiguratorError("Role name is required.")

        numeric_fields = {
            field.field_name
            for field in self.metadata_fields(global_attribute_id)
            if field.field_type == "number"
        }
        for field_name in (price_modifier_field, weight_modifier_field):
            if field_name and field_name not in numeric_fields:
                raise InvalidMetadata(
                    "Modifier field {} is not a number field of this attribute.".format(field_name)
                )

        link = ProductGlobalAttributeLink(
            product_id=product_id,
            global_attribute_id=global_attribute_id,
            role_name=role_name,
            role_display_name=(role_display_name or role_name).strip(),
            position=position,
            affects_pricing=affects_pricing,
            affects_shipping=affects_shipping,
            price_modifier_field=price_modifier_field,
            weight_modifier_field=weight_modifier_field,
        )
        self.db.add(link)
        self._commit("Product {} already links this attribute as '{}'.".format(product_id, role_name))
        self.db.refresh(link)
        self.logger.info(
            "Global attribute %s linked to product %s as %s.", global_attribute_id, product_id, role_name
        )
        return link

    def get_link(self, link_id: int) -> ProductGlobalAttributeLink:
        return self._get(ProductGlobalAttributeLink, link_id, "Global attribute link")

    def delete_link(self, link_id: int) -> None:
        link = self.get_link(link_id)
        self.db.delete(link)
        self.db.commit()
        self.logger.info("Global attribute link %s deleted.", link_id)

    def list_selections(self, link_id: int) -> list[ProductGlobalOptionSelection]:
        return list(
            self.db.execute(
                select(ProductGlobalOptionSelection)
                .where(ProductGlobalOptionSelection.link_id == link_id)
                .order_by(ProductGlobalOptionSelection.id)
            )
            .scalars()
            .all()
        )

    def set_selections(self, link_id: int, selections: Iterable[OptionSelection]) -> list[ProductGlobalOptionSelection]:
        """Replace every selection of a link in one transaction; an empty list selects all."""
        link = self.get_link(link_id)
        selections = list(selections)
        valid_ids = set(
            self.db.execute(
                select(GlobalAttributeOption.id).where(
                    GlobalAttributeOption.global_attribute_id == link.global_attribute_id
                )
            ).scalars()
        )
        seen = set()
        for selection in selections:
            if selection.option_id not in valid_ids:
                raise ConfiguratorError(
                    "Option {} does not belong to global attribute {}.".format(
                        selection.option_id, link.global_attribute_id
                    )
                )
            if selection.option_id in seen:
                raise ConfiguratorError("Option {} selected twice.".format(selection.option_id))
            seen.add(selection.option_id)

        self.db.execute(
            delete(ProductGlobalOptionSelection).where(ProductGlobalOptionSelection.link_id == link_id)
        )
        rows = []
        for selection in selections:
            row = ProductGlobalOptionSelection(
                link_id=link_id,
                global_option_id=selection.option_id,
                price_modifier=(
                    Decimal(str(selection.price_modifier))
                    if selection.price_modifier is not None
                    else None
                ),
                weight_modifier_grams=selection.weight_modifier,
                position_override=selection.position_override,
            )
            self.db.add(row)
            rows.append(row)
        self.db.commit()
        self.db.expire(link, ["selections"])
        self.logger.info("Option selections for link %s updated (%d).", link_id, len(rows))
        return rows


__all__ = ["GlobalAttributeService"]
