import unittest
from decimal import Decimal

from configurator.core.producibility import producible_units

LEATHER = 1
THREAD = 2
BUCKLE = 3


class ProducibilityTest(unittest.TestCase):
    def test_minimum_over_materials(self):
        result = producible_units(
            {LEATHER: Decimal("1"), THREAD: Decimal("3")},
            {LEATHER: Decimal("10"), THREAD: Decimal("100")},
        )

        self.assertEqual(result.units, 10)
        self.assertEqual(result.limiting_material_id, LEATHER)
        self.assertEqual(result.status, "constrained")

    def test_fractional_requirements_floor(self):
        result = producible_units({LEATHER: Decimal("1.4")}, {LEATHER: Decimal("10")})

        self.assertEqual(result.units, 7)

    def test_missing_stock_counts_as_zero(self):
        result = producible_units(
            {LEATHER: Decimal("1"), BUCKLE: Decimal("2")},
            {LEATHER: Decimal("10")},
        )

        self.assertEqual(result.units, 0)
        self.assertEqual(result.limiting_material_id, BUCKLE)
        self.assertEqual(result.missing_material_ids, (BUCKLE,))

    def test_negative_stock_counts_as_zero(self):
        result = producible_units({LEATHER: Decimal("1")}, {LEATHER: Decimal("-4")})

        self.assertEqual(result.units, 0)
        self.assertEqual(result.missing_material_ids, ())

    def test_nothing_required_is_unconstrained(self):
        result = producible_units({LEATHER: Decimal("0")}, {})

        self.assertIsNone(result.units)
        self.assertTrue(result.unconstrained)
        self.assertEqual(result.status, "unconstrained")

    def test_empty_bom_is_unconstrained(self):
        self.assertTrue(producible_units({}, {LEATHER: Decimal("5")}).unconstrained)


if __name__ == "__main__":
    unittest.main()
