import unittest
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy import event, func, select

from configurator.core.axes import OptionSelection
from configurator.core.constants import EVENT_VARIANT_GENERATED
from configurator.core.errors import DuplicateAxisKey, NoAttributeAxes, SKUCollisionUnresolved
from configurator.models.variant import ProductVariant
from configurator.services.catalog_service import CatalogService
from configurator.services.global_attribute_service import GlobalAttributeService
from configurator.services.variant_service import VariantService

from support import RecordingPublisher, make_session, make_settings


class VariantGenerationTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.db = make_session()
        self.settings = make_settings()
        self.events = RecordingPublisher()
        self.catalog = CatalogService(self.db, settings=self.settings)
        self.product = self.catalog.create_product("Tote bag", sku_prefix="BAG", base_price="40.00")
        self.color = self.catalog.create_attribute(self.product.id, "color")
        self.size = self.catalog.create_attribute(self.product.id, "size")
        for value in ("Black", "White", "Red"):
            self.catalog.add_option(self.color.id, value)
        for value in ("Small", "Large"):
            self.catalog.add_option(self.size.id, value)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _service(self, **settings):
        return VariantService(
            self.db,
            settings=make_settings(**settings) if settings else self.settings,
            events=self.events,
        )

    def _variant_count(self):
        return self.db.execute(
            select(func.count(ProductVariant.id)).where(ProductVariant.product_id == self.product.id)
        ).scalar()

    def test_generates_full_cartesian_product(self):
        created = self._service().generate_variants(self.product.id)

        self.assertEqual(len(created), 6)
        skus = [variant.sku for variant in created]
        self.assertEqual(len(set(skus)), 6)
        self.assertIn("BAG-BLA-SMA", skus)
        self.assertIn("BAG-RED-LAR", skus)
        self.assertEqual([variant.position for variant in created], list(range(6)))
        for variant in created:
            self.assertIsNone(variant.price)
            self.assertIsNone(variant.weight_grams)
            self.assertEqual(variant.stock_quantity, 0)
            self.assertTrue(variant.is_active)
            self.assertEqual(len(variant.options), 2)

        published = self.events.of_type(EVENT_VARIANT_GENERATED)
        self.assertEqual(len(published), 1)
        self.assertEqual(published[0]["product_id"], self.product.id)
        self.assertEqual(sorted(published[0]["variant_ids"]), sorted(v.id for v in created))

    def test_regeneration_is_idempotent(self):
        service = self._service()
        service.generate_variants(self.product.id)

        again = service.generate_variants(self.product.id)

        self.assertEqual(again, [])
        self.assertEqual(self._variant_count(), 6)
        self.assertEqual(len(self.events.of_type(EVENT_VARIANT_GENERATED)), 1)

    def test_new_option_adds_only_missing_combinations(self):
        service = self._service()
        first = service.generate_variants(self.product.id)
        kept = first[0]
        kept.stock_quantity = 7
        kept.price = Decimal("99.00")
        self.db.commit()
        before = {variant.id: variant.sku for variant in first}

        self.catalog.add_option(self.color.id, "Blue")
        created = service.generate_variants(self.product.id)

        self.assertEqual(len(created), 2)
        self.assertEqual({variant.sku for variant in created}, {"BAG-BLU-SMA", "BAG-BLU-LAR"})
        self.assertEqual(sorted(variant.position for variant in created), [6, 7])
        self.assertEqual(self._variant_count(), 8)

        self.db.expire_all()
        for variant_id, sku in before.items():
            self.assertEqual(self.db.get(ProductVariant, variant_id).sku, sku)
        refreshed = self.db.get(ProductVariant, kept.id)
        self.assertEqual(refreshed.stock_quantity, 7)
        self.assertEqual(refreshed.price, Decimal("99.00"))

    def test_colliding_abbreviations_get_suffixes(self):
        self.catalog.add_option(self.color.id, "Blackberry")

        created = self._service().generate_variants(self.product.id)

        skus = [variant.sku for variant in created]
        self.assertEqual(len(skus), 8)
        self.assertEqual(len(set(skus)), 8)
        self.assertIn("BAG-BLA-SMA-2", skus)

    def test_collision_limit_aborts_without_creating_anything(self):
        self.catalog.add_option(self.color.id, "Blackberry")

        with self.assertRaises(SKUCollisionUnresolved):
            self._service(SKU_MAX_COLLISION_ATTEMPTS=1).generate_variants(self.product.id)
        self.assertEqual(self._variant_count(), 0)

    def test_sku_collision_with_other_product_is_avoided(self):
        other = self.catalog.create_product("Backpack", sku_prefix="BAG")
        color = self.catalog.create_attribute(other.id, "color")
        size = self.catalog.create_attribute(other.id, "size")
        self.catalog.add_option(color.id, "Black")
        self.catalog.add_option(size.id, "Small")
        service = self._service()
        service.generate_variants(self.product.id)

        created = service.generate_variants(other.id)

        self.assertEqual([variant.sku for variant in created], ["BAG-BLA-SMA-2"])

    def test_product_without_axes_is_rejected(self):
        bare = self.catalog.create_product("Poster")

        with self.assertRaises(NoAttributeAxes):
            self._service().generate_variants(bare.id)
        self.assertEqual(
            self.db.execute(
                select(func.count(ProductVariant.id)).where(ProductVariant.product_id == bare.id)
            ).scalar(),
            0,
        )

    def test_axes_with_only_inactive_options_are_named(self):
        bare = self.catalog.create_product("Poster")
        finish = self.catalog.create_attribute(bare.id, "finish")
        option = self.catalog.add_option(finish.id, "Gloss")
        self.catalog.set_option_active(option.id, False)

        with self.assertRaises(NoAttributeAxes) as ctx:
            self._service().generate_variants(bare.id)
        self.assertIn("finish", str(ctx.exception))

    def test_duplicate_axis_key_is_rejected(self):
        globals_ = GlobalAttributeService(self.db, settings=self.settings)
        shared = globals_.create_attribute("Shared color")
        globals_.add_option(shared.id, "Navy")
        globals_.link_to_product(self.product.id, shared.id, "color")

        with self.assertRaises(DuplicateAxisKey):
            self._service().generate_variants(self.product.id)
        self.assertEqual(self._variant_count(), 0)

    def test_inactive_attribute_yields_its_key_to_a_global_link(self):
        poster = self.catalog.create_product("Poster", sku_prefix="PST")
        color = self.catalog.create_attribute(poster.id, "color")
        red = self.catalog.add_option(color.id, "Red")
        self.catalog.set_option_active(red.id, False)
        globals_ = GlobalAttributeService(self.db, settings=self.settings)
        shared = globals_.create_attribute("Shared color")
        globals_.add_option(shared.id, "Navy")
        globals_.link_to_product(poster.id, shared.id, "color")

        created = self._service().generate_variants(poster.id)

        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].options, [])
        self.assertEqual(len(created[0].global_options), 1)

    def test_concurrent_insert_is_treated_as_existing(self):
        service = self._service()
        service.generate_variants(self.product.id)
        real_identities = service._existing_identities(self.product.id)

        # the first read misses the rows another writer just committed
        with patch.object(
            service, "_existing_identities", side_effect=[set(), real_identities]
        ) as loader:
            created = service.generate_variants(self.product.id)

        self.assertEqual(created, [])
        self.assertEqual(loader.call_count, 2)
        self.assertEqual(self._variant_count(), 6)


class GlobalAxisVariantTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.db = make_session()
        self.settings = make_settings()
        self.catalog = CatalogService(self.db, settings=self.settings)
        self.globals = GlobalAttributeService(self.db, settings=self.settings)

        self.lining = self.globals.create_attribute("lining")
        self.globals.add_metadata_field(self.lining.id, "surcharge", field_type="number")
        self.silk = self.globals.add_option(self.lining.id, "Silk", metadata={"surcharge": "8.00"})
        self.cotton = self.globals.add_option(self.lining.id, "Cotton", metadata={"surcharge": "2.00"})

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _product(self, name):
        product = self.catalog.create_product(name, base_price="20.00")
        size = self.catalog.create_attribute(product.id, "size", position=0)
        self.catalog.add_option(size.id, "Small", price_modifier="1.00")
        link = self.globals.link_to_product(
            product.id, self.lining.id, "lining", position=1, price_modifier_field="surcharge"
        )
        return product, link

    def test_selection_overrides_apply_to_one_product_only(self):
        jacket, jacket_link = self._product("Jacket")
        coat, _coat_link = self._product("Coat")
        self.globals.set_selections(
            jacket_link.id, [OptionSelection(option_id=self.silk.id, price_modifier=Decimal("15.00"))]
        )

        service = VariantService(self.db, settings=self.settings)
        jacket_variants = service.generate_variants(jacket.id)
        coat_variants = service.generate_variants(coat.id)

        self.assertEqual(len(jacket_variants), 1)
        self.assertEqual(len(coat_variants), 2)
        self.assertEqual(service.effective_price(jacket_variants[0]), Decimal("36.00"))
        coat_prices = sorted(service.effective_price(variant) for variant in coat_variants)
        self.assertEqual(coat_prices, [Decimal("23.00"), Decimal("29.00")])

    def test_global_options_are_stored_against_the_link(self):
        jacket, link = self._product("Jacket")

        created = VariantService(self.db, settings=self.settings).generate_variants(jacket.id)

        for variant in created:
            self.assertEqual(len(variant.options), 1)
            self.assertEqual(len(variant.global_options), 1)
            self.assertEqual(variant.global_options[0].link_id, link.id)

    def test_inactive_global_attribute_contributes_no_axis(self):
        jacket, _link = self._product("Jacket")
        self.lining.is_active = False
        self.db.commit()

        created = VariantService(self.db, settings=self.settings).generate_variants(jacket.id)

        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].global_options, [])

    def test_modifiers_load_in_one_query_per_source(self):
        jacket, link = self._product("Jacket")
        second = self.globals.create_attribute("trim")
        self.globals.add_option(second.id, "Piping")
        self.globals.link_to_product(jacket.id, second.id, "trim", position=2)
        self.globals.set_selections(
            link.id, [OptionSelection(option_id=self.silk.id, price_modifier=Decimal("15.00"))]
        )
        service = VariantService(self.db, settings=self.settings)
        (variant,) = service.generate_variants(jacket.id)
        self.db.expire_all()
        variant = self.db.get(ProductVariant, variant.id)
        self.assertEqual((len(variant.options), len(variant.global_options)), (1, 2))

        statements = []

        def listener(_conn, _cursor, statement, *_args):
            if statement.lstrip().upper().startswith("SELECT"):
                statements.append(statement)

        event.listen(self.engine, "before_cursor_execute", listener)
        try:
            modifiers = service.option_modifiers(variant)
        finally:
            event.remove(self.engine, "before_cursor_execute", listener)

        self.assertEqual(len(statements), 2)
        self.assertEqual(
            sorted((option.value, option.price_modifier) for option in modifiers),
            [("Piping", None), ("Silk", Decimal("15.00")), ("Small", Decimal("1.00"))],
        )

    def test_new_global_option_adds_missing_combinations(self):
        jacket, _link = self._product("Jacket")
        service = VariantService(self.db, settings=self.settings)
        self.assertEqual(len(service.generate_variants(jacket.id)), 2)

        wool = self.globals.add_option(self.lining.id, "Wool", metadata={"surcharge": "5.00"})
        created = service.generate_variants(jacket.id)

        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].global_options[0].global_option_id, wool.id)
        self.assertEqual(service.effective_price(created[0]), Decimal("26.00"))


if __name__ == "__main__":
    unittest.main()
