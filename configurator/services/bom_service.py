from typing import Optional

from sqlalchemy import select

from configurator.core.bom_rules import (
    BaselineLine,
    BOMRules,
    OptionAddition,
    OptionModifier,
    ResolvedBOM,
    SelectedOption,
    VariantOverride,
    resolve_bom,
)
from configurator.core.constants import (
    MODIFIER_ADD,
    MODIFIER_TYPES,
    OVERRIDE_REMOVE,
    OVERRIDE_REPLACE,
    OVERRIDE_TYPES,
    UNITS_OF_MEASURE,
)
from configurator.core.errors import ConfiguratorError, InvalidModifierReference, InvalidOverride
from configurator.core.producibility import Producibility, producible_units
from configurator.core.quantities import require_non_negative, to_decimal
from configurator.models.attribute import ProductAttribute, ProductAttributeOption
from configurator.models.bom import (
    OptionBOMEntry,
    OptionBOMModifier,
    ProductBOMEntry,
    VariantBOMOverride,
)
from configurator.models.product import Product
from configurator.models.raw_material import RawMaterial
from configurator.models.variant import ProductVariant
from configurator.services.base import Service


class BOMService(Service):
    """Authoring of the four BOM layers, and per-variant resolution over them."""

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _material(self, raw_material_id: int) -> RawMaterial:
        return self._get(RawMaterial, raw_material_id, "Raw material")

    def _unit(self, unit: Optional[str], material: RawMaterial) -> str:
        unit = unit or material.unit_of_measure
        if unit not in UNITS_OF_MEASURE:
            raise ConfiguratorError("Unknown unit of measure {}.".format(unit))
        return unit

    # ------------------------------------------------------------------
    # Layer 1: product baseline
    # ------------------------------------------------------------------

    def add_baseline_entry(
        self,
        product_id: int,
        raw_material_id: int,
        quantity,
        *,
        unit: Optional[str] = None,
        is_required: bool = True,
        notes: Optional[str] = None,
    ) -> ProductBOMEntry:
        self._get(Product, product_id, "Product")
        material = self._material(raw_material_id)
        entry = ProductBOMEntry(
            product_id=product_id,
            raw_material_id=raw_material_id,
            quantity=require_non_negative("quantity", quantity),
            unit_of_measure=self._unit(unit, material),
            is_required=is_required,
            notes=notes,
        )
        self.db.add(entry)
        self._commit(
            "Product {} already has a BOM entry for material {}.".format(product_id, raw_material_id)
        )
        self.db.refresh(entry)
        self.logger.info(
            "BOM entry %s added to product %s (material %s).", entry.id, product_id, raw_material_id
        )
        return entry

    def update_baseline_entry(
        self,
        entry_id: int,
        quantity,
        *,
        unit: Optional[str] = None,
        is_required: Optional[bool] = None,
        notes: Optional[str] = None,
    ) -> ProductBOMEntry:
        entry = self._get(ProductBOMEntry, entry_id, "BOM entry")
        entry.quantity = require_non_negative("quantity", quantity)
        if unit is not None:
            entry.unit_of_measure = self._unit(unit, self._material(entry.raw_material_id))
        if is_required is not None:
            entry.is_required = is_required
        if notes is not None:
            entry.notes = notes
        self.db.commit()
        self.logger.info("BOM entry %s updated.", entry_id)
        return entry

    def list_baseline(self, product_id: int) -> list[ProductBOMEntry]:
        return list(
            self.db.execute(
                select(ProductBOMEntry)
                .where(ProductBOMEntry.product_id == product_id)
                .order_by(ProductBOMEntry.id)
            )
            .scalars()
            .all()
        )

    def delete_baseline_entry(self, entry_id: int) -> None:
        self._delete(ProductBOMEntry, entry_id, "BOM entry")

    # ------------------------------------------------------------------
    # Layer 2a / 2b: option rules
    # ------------------------------------------------------------------

    def add_option_entry(
        self,
        option_id: int,
        raw_material_id: int,
        quantity,
        *,
        unit: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> OptionBOMEntry:
        self._get(ProductAttributeOption, option_id, "Option")
        material = self._material(raw_material_id)
        entry = OptionBOMEntry(
            option_id=option_id,
            raw_material_id=raw_material_id,
            quantity=require_non_negative("quantity", quantity),
            unit_of_measure=self._unit(unit, material),
            notes=notes,
        )
        self.db.add(entry)
        self._commit(
            "Option {} already has a BOM entry for material {}.".format(option_id, raw_material_id)
        )
        self.db.refresh(entry)
        self.logger.info("Option BOM entry %s added to option %s.", entry.id, option_id)
        return entry

    def list_option_entries(self, option_id: int) -> list[OptionBOMEntry]:
        return list(
            self.db.execute(
                select(OptionBOMEntry).where(OptionBOMEntry.option_id == option_id).order_by(OptionBOMEntry.id)
            )
            .scalars()
            .all()
        )

    def delete_option_entry(self, entry_id: int) -> None:
        self._delete(OptionBOMEntry, entry_id, "Option BOM entry")

    def add_option_modifier(
        self,
        option_id: int,
        product_bom_entry_id: int,
        modifier_type: str,
        modifier_value,
        *,
        notes: Optional[str] = None,
    ) -> OptionBOMModifier:
        option = self._get(ProductAttributeOption, option_id, "Option")
        entry = self._get(ProductBOMEntry, product_bom_entry_id, "BOM entry")
        attribute = self._get(ProductAttribute, option.attribute_id, "Attribute")
        if entry.product_id != attribute.product_id:
            raise InvalidModifierReference(
                "BOM entry {} belongs to product {}, option {} to product {}.".format(
                    entry.id, entry.product_id, option_id, attribute.product_id
                )
            )
        if modifier_type not in MODIFIER_TYPES:
            raise InvalidModifierReference("Unknown modifier type {}.".format(modifier_type))
        if modifier_type == MODIFIER_ADD:
            value = to_decimal(modifier_value)
        else:
            value = require_non_negative("modifier_value", modifier_value)

        modifier = OptionBOMModifier(
            option_id=option_id,
            product_bom_entry_id=product_bom_entry_id,
            modifier_type=modifier_type,
            modifier_value=value,
            notes=notes,
        )
        self.db.add(modifier)
        self._commit(
            "Option {} already modifies BOM entry {}.".format(option_id, product_bom_entry_id)
        )
        self.db.refresh(modifier)
        self.logger.info(
            "BOM modifier %s (%s %s) added to option %s.", modifier.id, modifier_type, value, option_id
        )
        return modifier

    def list_option_modifiers(self, option_id: int) -> list[OptionBOMModifier]:
        return list(
            self.db.execute(
                select(OptionBOMModifier)
                .where(OptionBOMModifier.option_id == option_id)
                .order_by(OptionBOMModifier.id)
            )
            .scalars()
            .all()
        )

    def delete_option_modifier(self, modifier_id: int) -> None:
        self._delete(OptionBOMModifier, modifier_id, "BOM modifier")

    # ------------------------------------------------------------------
    # Layer 3: variant overrides
    # ------------------------------------------------------------------

    def add_variant_override(
        self,
        variant_id: int,
        override_type: str,
        raw_material_id: int,
        *,
        replaces_material_id: Optional[int] = None,
        quantity=None,
        unit: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> VariantBOMOverride:
        self._get(ProductVariant, variant_id, "Variant")
        if override_type not in OVERRIDE_TYPES:
            raise InvalidOverride("Unknown override type {}.".format(override_type))
        material = self._material(raw_material_id)
        if override_type == OVERRIDE_REPLACE:
            if replaces_material_id is None:
                raise InvalidOverride("A replace override needs replaces_material_id.")
            self._material(replaces_material_id)
        elif replaces_material_id is not None:
            raise InvalidOverride("replaces_material_id only applies to replace overrides.")
        if quantity is not None:
            quantity = require_non_negative("quantity", quantity)
        elif override_type not in (OVERRIDE_REPLACE, OVERRIDE_REMOVE):
            raise InvalidOverride("A {} override needs a quantity.".format(override_type))
        if unit is not None:
            unit = self._unit(unit, material)

        override = VariantBOMOverride(
            variant_id=variant_id,
            raw_material_id=raw_material_id,
            override_type=override_type,
            replaces_material_id=replaces_material_id,
            quantity=quantity,
            unit_of_measure=unit,
            notes=notes,
        )
        self.db.add(override)
        self._commit("Override could not be stored.")
        self.db.refresh(override)
        self.logger.info(
            "BOM override %s (%s material %s) added to variant %s.",
            override.id,
            override_type,
            raw_material_id,
            variant_id,
        )
        return override

    def list_variant_overrides(self, variant_id: int) -> list[VariantBOMOverride]:
        return list(
            self.db.execute(
                select(VariantBOMOverride)
                .where(VariantBOMOverride.variant_id == variant_id)
                .order_by(VariantBOMOverride.id)
            )
            .scalars()
            .all()
        )

    def delete_variant_override(self, override_id: int) -> None:
        self._delete(VariantBOMOverride, override_id, "BOM override")

    def _delete(self, model, row_id: int, entity_name: str) -> None:
        row = self._get(model, row_id, entity_name)
        self.db.delete(row)
        self.db.commit()
        self.logger.info("%s %s deleted.", entity_name, row_id)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def load_rules(self, variant: ProductVariant) -> tuple[BOMRules, list[SelectedOption]]:
        """Rule rows and ordered option positions that apply to one variant.

        Only product attribute options carry option-level BOM rules; global
        options never appear in the selection.
        """
        option_ids = [row.option_id for row in variant.options]
        selected = []
        if option_ids:
            rows = self.db.execute(
                select(
                    ProductAttributeOption.id,
                    ProductAttributeOption.position,
                    ProductAttribute.id,
                    ProductAttribute.position,
                )
                .join(ProductAttribute, ProductAttribute.id == ProductAttributeOption.attribute_id)
                .where(ProductAttributeOption.id.in_(option_ids))
            ).all()
            for option_id, option_position, attribute_id, attribute_position in rows:
                selected.append(
                    SelectedOption(
                        option_id=option_id,
                        axis_position=attribute_position,
                        option_position=option_position,
                        axis_id=attribute_id,
                    )
                )

        rules = BOMRules()
        for entry in self.list_baseline(variant.product_id):
            rules.baseline.append(
                BaselineLine(entry.id, entry.raw_material_id, to_decimal(entry.quantity), entry.unit_of_measure)
            )
        if option_ids:
            additions = self.db.execute(
                select(OptionBOMEntry).where(OptionBOMEntry.option_id.in_(option_ids))
            ).scalars()
            for row in additions:
                rules.additions.append(
                    OptionAddition(
                        row.id, row.option_id, row.raw_material_id, to_decimal(row.quantity), row.unit_of_measure
                    )
                )
            modifiers = self.db.execute(
                select(OptionBOMModifier).where(OptionBOMModifier.option_id.in_(option_ids))
            ).scalars()
            for row in modifiers:
                rules.modifiers.append(
                    OptionModifier(
                        row.id,
                        row.option_id,
                        row.product_bom_entry_id,
                        row.modifier_type,
                        to_decimal(row.modifier_value),
                    )
                )
        for row in self.list_variant_overrides(variant.id):
            rules.overrides.append(
                VariantOverride(
                    id=row.id,
                    override_type=row.override_type,
                    raw_material_id=row.raw_material_id,
                    replaces_material_id=row.replaces_material_id,
                    quantity=None if row.quantity is None else to_decimal(row.quantity),
                    unit=row.unit_of_measure,
                )
            )
        return rules, selected

    def resolve_variant_bom(self, variant_id: int) -> ResolvedBOM:
        variant = self._get(ProductVariant, variant_id, "Variant")
        rules, selected = self.load_rules(variant)
        return resolve_bom(rules, selected)

    def stock_levels(self, material_ids) -> dict:
        """Stock of active raw materials; inactive or unknown ones are left out."""
        material_ids = list(material_ids)
        if not material_ids:
            return {}
        rows = self.db.execute(
            select(RawMaterial.id, RawMaterial.stock_quantity).where(
                RawMaterial.id.in_(material_ids), RawMaterial.is_active.is_(True)
            )
        ).all()
        return {material_id: to_decimal(stock) for material_id, stock in rows}

    def compute_producibility(self, variant_id: int) -> Producibility:
        resolved = self.resolve_variant_bom(variant_id)
        result = producible_units(resolved.quantities, self.stock_levels(resolved.quantities))
        if result.missing_material_ids:
            self.logger.warning(
                "Variant %s needs material(s) with no stock record: %s.",
                variant_id,
                ", ".join(str(material_id) for material_id in result.missing_material_ids),
            )
        return result

    def product_producibility(self, product_id: int) -> list[tuple[ProductVariant, Producibility]]:
        self._get(Product, product_id, "Product")
        variants = (
            self.db.execute(
                select(ProductVariant)
                .where(ProductVariant.product_id == product_id, ProductVariant.is_active.is_(True))
                .order_by(ProductVariant.position, ProductVariant.id)
            )
            .scalars()
            .all()
        )
        return [(variant, self.compute_producibility(variant.id)) for variant in variants]


__all__ = ["BOMService"]
