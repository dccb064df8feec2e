import unittest
from decimal import Decimal

from configurator.core.axes import OptionSelection
from configurator.core.errors import Conflict, ConfiguratorError, InvalidMetadata
from configurator.services.axis_service import AxisService
from configurator.services.catalog_service import CatalogService
from configurator.services.global_attribute_service import GlobalAttributeService

from support import make_session, make_settings


class GlobalAttributeServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.db = make_session()
        settings = make_settings()
        self.catalog = CatalogService(self.db, settings=settings)
        self.service = GlobalAttributeService(self.db, settings=settings)
        self.axes = AxisService(self.db, settings=settings)

        self.fabric = self.service.create_attribute("fabric", category="materials")
        self.service.add_metadata_field(self.fabric.id, "surcharge", field_type="number", default_value="0")
        self.service.add_metadata_field(
            self.fabric.id, "weight", field_type="number", display_name="Weight (g)"
        )
        self.cotton = self.service.add_option(self.fabric.id, "Cotton", metadata={"surcharge": "3", "weight": 40})
        self.linen = self.service.add_option(self.fabric.id, "Linen", metadata={"surcharge": "6"})
        self.product = self.catalog.create_product("Shirt")

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_option_metadata_is_validated_and_defaulted(self):
        option = self.service.add_option(self.fabric.id, "Hemp")

        self.assertEqual(option.option_metadata, {"surcharge": "0"})
        with self.assertRaises(InvalidMetadata):
            self.service.add_option(self.fabric.id, "Silk", metadata={"surcharge": "expensive"})

    def test_select_field_needs_choices(self):
        with self.assertRaises(InvalidMetadata):
            self.service.add_metadata_field(self.fabric.id, "origin", field_type="select")

    def test_modifier_field_must_be_numeric_field(self):
        with self.assertRaises(InvalidMetadata):
            self.service.link_to_product(
                self.product.id, self.fabric.id, "fabric", price_modifier_field="colour"
            )

    def test_link_role_is_unique_per_product(self):
        self.service.link_to_product(self.product.id, self.fabric.id, "fabric")

        with self.assertRaises(Conflict):
            self.service.link_to_product(self.product.id, self.fabric.id, "fabric")

    def test_axis_uses_metadata_modifiers(self):
        self.service.link_to_product(
            self.product.id,
            self.fabric.id,
            "fabric",
            price_modifier_field="surcharge",
            weight_modifier_field="weight",
        )

        (axis,) = self.axes.resolve(self.product.id)

        self.assertEqual(axis.source, "global")
        self.assertEqual([option.value for option in axis.options], ["Cotton", "Linen"])
        self.assertEqual(axis.options[0].price_modifier, Decimal("3"))
        self.assertEqual(axis.options[0].weight_modifier, 40)
        self.assertIsNone(axis.options[1].weight_modifier)

    def test_selections_replace_previous_set(self):
        link = self.service.link_to_product(self.product.id, self.fabric.id, "fabric")
        self.service.set_selections(link.id, [OptionSelection(option_id=self.cotton.id)])

        self.service.set_selections(
            link.id, [OptionSelection(option_id=self.linen.id, price_modifier=Decimal("1.50"))]
        )

        rows = self.service.list_selections(link.id)
        self.assertEqual([row.global_option_id for row in rows], [self.linen.id])
        (axis,) = self.axes.resolve(self.product.id)
        self.assertEqual([option.id for option in axis.options], [self.linen.id])
        self.assertEqual(axis.options[0].price_modifier, Decimal("1.50"))

    def test_empty_selection_restores_all_options(self):
        link = self.service.link_to_product(self.product.id, self.fabric.id, "fabric")
        self.service.set_selections(link.id, [OptionSelection(option_id=self.cotton.id)])

        self.service.set_selections(link.id, [])

        (axis,) = self.axes.resolve(self.product.id)
        self.assertEqual(axis.cardinality, 2)

    def test_selection_must_belong_to_linked_attribute(self):
        other = self.service.create_attribute("finish")
        matte = self.service.add_option(other.id, "Matte")
        link = self.service.link_to_product(self.product.id, self.fabric.id, "fabric")

        with self.assertRaises(ConfiguratorError):
            self.service.set_selections(link.id, [OptionSelection(option_id=matte.id)])


if __name__ == "__main__":
    unittest.main()
