import unittest
from decimal import Decimal

from sqlalchemy import func, select

from configurator.core.errors import (
    Conflict,
    InvalidModifierReference,
    InvalidOverride,
    NegativeQuantity,
)
from configurator.models.bom import ProductBOMEntry
from configurator.services.bom_service import BOMService
from configurator.services.catalog_service import CatalogService
from configurator.services.raw_material_service import RawMaterialService
from configurator.services.variant_service import VariantService

from support import make_session, make_settings


class BOMServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.db = make_session()
        settings = make_settings()
        catalog = CatalogService(self.db, settings=settings)
        materials = RawMaterialService(self.db, settings=settings)
        self.bom = BOMService(self.db, settings=settings)

        self.leather = materials.create_material("Leather", "RM-LEA", unit_of_measure="m2", stock_quantity="10")
        self.thread = materials.create_material("Thread", "RM-THR", unit_of_measure="m", stock_quantity="100")
        self.brass = materials.create_material("Brass buckle", "RM-BRA", stock_quantity="0")
        self.canvas = materials.create_material("Canvas", "RM-CAN", unit_of_measure="m2", stock_quantity="50")

        self.product = catalog.create_product("Tote bag", sku_prefix="BAG")
        color = catalog.create_attribute(self.product.id, "color")
        size = catalog.create_attribute(self.product.id, "size")
        self.black = catalog.add_option(color.id, "Black")
        self.brown = catalog.add_option(color.id, "Brown")
        self.small = catalog.add_option(size.id, "Small")
        self.large = catalog.add_option(size.id, "Large")

        self.leather_entry = self.bom.add_baseline_entry(self.product.id, self.leather.id, "1.0")
        self.bom.add_baseline_entry(self.product.id, self.thread.id, 3)
        self.bom.add_option_modifier(self.large.id, self.leather_entry.id, "multiply", "1.4")
        self.bom.add_option_entry(self.brown.id, self.brass.id, 2)

        self.other = catalog.create_product("Wallet")
        wallet_color = catalog.create_attribute(self.other.id, "color")
        self.wallet_black = catalog.add_option(wallet_color.id, "Black")

        self.variants = VariantService(self.db, settings=settings).generate_variants(self.product.id)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _variant(self, *options):
        wanted = {option.id for option in options}
        for variant in self.variants:
            if {row.option_id for row in variant.options} == wanted:
                return variant
        raise AssertionError("no variant for {}".format(sorted(wanted)))

    def test_baseline_resolution_and_producibility(self):
        variant = self._variant(self.black, self.small)

        resolved = self.bom.resolve_variant_bom(variant.id)
        result = self.bom.compute_producibility(variant.id)

        self.assertEqual(resolved.as_dict(), {self.leather.id: Decimal("1"), self.thread.id: Decimal("3")})
        self.assertEqual(resolved.units[self.leather.id], "m2")
        self.assertEqual(result.units, 10)
        self.assertEqual(result.limiting_material_id, self.leather.id)

    def test_large_multiplies_leather(self):
        variant = self._variant(self.black, self.large)

        resolved = self.bom.resolve_variant_bom(variant.id)

        self.assertEqual(resolved.quantities[self.leather.id], Decimal("1.4"))
        self.assertEqual(self.bom.compute_producibility(variant.id).units, 7)

    def test_option_addition_limits_producibility(self):
        variant = self._variant(self.brown, self.small)

        resolved = self.bom.resolve_variant_bom(variant.id)
        result = self.bom.compute_producibility(variant.id)

        self.assertEqual(resolved.quantities[self.brass.id], Decimal("2"))
        self.assertEqual(result.units, 0)
        self.assertEqual(result.limiting_material_id, self.brass.id)

    def test_replace_override(self):
        variant = self._variant(self.black, self.small)
        self.bom.add_variant_override(
            variant.id, "replace", self.canvas.id, replaces_material_id=self.leather.id, quantity=1
        )

        resolved = self.bom.resolve_variant_bom(variant.id)

        self.assertNotIn(self.leather.id, resolved.quantities)
        self.assertEqual(resolved.quantities[self.canvas.id], Decimal("1"))
        # other variants keep the baseline
        sibling = self._variant(self.brown, self.small)
        self.assertIn(self.leather.id, self.bom.resolve_variant_bom(sibling.id).quantities)

    def test_remove_override_of_absent_material_is_a_no_op(self):
        variant = self._variant(self.black, self.small)
        self.bom.add_variant_override(variant.id, "remove", self.brass.id)

        resolved = self.bom.resolve_variant_bom(variant.id)

        self.assertEqual(set(resolved.quantities), {self.leather.id, self.thread.id})

    def test_inactive_material_is_reported_missing(self):
        self.brass.is_active = False
        self.db.commit()
        variant = self._variant(self.brown, self.large)

        result = self.bom.compute_producibility(variant.id)

        self.assertEqual(result.units, 0)
        self.assertEqual(result.missing_material_ids, (self.brass.id,))

    def test_product_report_covers_active_variants(self):
        self.variants[0].is_active = False
        self.db.commit()

        report = self.bom.product_producibility(self.product.id)

        self.assertEqual(len(report), 3)
        self.assertNotIn(self.variants[0].id, [variant.id for variant, _result in report])

    def test_negative_quantity_is_rejected(self):
        with self.assertRaises(NegativeQuantity):
            self.bom.add_option_entry(self.black.id, self.canvas.id, "-0.5")
        with self.assertRaises(NegativeQuantity):
            self.bom.add_option_modifier(self.small.id, self.leather_entry.id, "multiply", -2)
        self.assertEqual(self.bom.list_option_entries(self.black.id), [])

    def test_negative_add_modifier_is_allowed(self):
        modifier = self.bom.add_option_modifier(self.small.id, self.leather_entry.id, "add", "-0.25")

        self.assertEqual(modifier.modifier_value, Decimal("-0.25"))

    def test_modifier_must_target_same_product(self):
        with self.assertRaises(InvalidModifierReference):
            self.bom.add_option_modifier(self.wallet_black.id, self.leather_entry.id, "multiply", 2)

    def test_unknown_modifier_type_is_rejected(self):
        with self.assertRaises(InvalidModifierReference):
            self.bom.add_option_modifier(self.small.id, self.leather_entry.id, "divide", 2)

    def test_replace_needs_target(self):
        variant = self._variant(self.black, self.small)

        with self.assertRaises(InvalidOverride):
            self.bom.add_variant_override(variant.id, "replace", self.canvas.id, quantity=1)
        with self.assertRaises(InvalidOverride):
            self.bom.add_variant_override(variant.id, "set_quantity", self.canvas.id)

    def test_duplicate_baseline_entry_conflicts(self):
        with self.assertRaises(Conflict):
            self.bom.add_baseline_entry(self.product.id, self.leather.id, 2)

        count = self.db.execute(
            select(func.count(ProductBOMEntry.id)).where(ProductBOMEntry.product_id == self.product.id)
        ).scalar()
        self.assertEqual(count, 2)

    def test_deleting_a_rule_changes_future_resolutions(self):
        variant = self._variant(self.black, self.large)
        modifier = self.bom.list_option_modifiers(self.large.id)[0]

        self.bom.delete_option_modifier(modifier.id)

        self.assertEqual(self.bom.resolve_variant_bom(variant.id).quantities[self.leather.id], Decimal("1"))


if __name__ == "__main__":
    unittest.main()
