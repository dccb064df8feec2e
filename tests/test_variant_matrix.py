import unittest
from decimal import Decimal

from configurator.core.axes import AxisOption, global_axis, product_axis
from configurator.core.errors import SKUCollisionUnresolved
from configurator.core.variant_matrix import (
    SkuAllocator,
    abbreviate,
    base_sku,
    cartesian_product,
    combination_refs,
    computed_price,
    computed_weight,
    default_sku_prefix,
    identity_hash,
    identity_key,
)


def _axis(axis_id, key, values, position, start_id):
    options = [
        AxisOption(id=start_id + index, value=value, display_value=value, position=index)
        for index, value in enumerate(values)
    ]
    return product_axis(axis_id, key, key.title(), position, options)


class CartesianProductTest(unittest.TestCase):
    def test_three_by_two_gives_six_distinct_identities(self):
        color = _axis(1, "color", ["Black", "White", "Red"], 0, 1)
        size = _axis(2, "size", ["Small", "Large"], 1, 10)

        combos = cartesian_product([color, size])

        self.assertEqual(len(combos), 6)
        keys = {identity_key(combination_refs(combo)) for combo in combos}
        self.assertEqual(len(keys), 6)

    def test_no_axes_gives_no_combinations(self):
        self.assertEqual(cartesian_product([]), [])

    def test_identity_ignores_axis_order(self):
        color = _axis(1, "color", ["Black"], 0, 1)
        size = _axis(2, "size", ["Small"], 1, 10)

        forward = combination_refs(cartesian_product([color, size])[0])
        backward = combination_refs(cartesian_product([size, color])[0])

        self.assertEqual(identity_key(forward), "a1:1|a2:10")
        self.assertEqual(identity_hash(forward), identity_hash(backward))

    def test_product_and_global_refs_do_not_collide(self):
        product = _axis(4, "color", ["Black"], 0, 1)
        shared = global_axis(4, "finish", "Finish", 1, [AxisOption(id=1, value="Matte", display_value="Matte")])

        refs = combination_refs(cartesian_product([product, shared])[0])

        self.assertEqual(identity_key(refs), "a4:1|g4:1")


class SkuTest(unittest.TestCase):
    def test_abbreviate_keeps_alphanumerics(self):
        self.assertEqual(abbreviate("black"), "BLA")
        self.assertEqual(abbreviate("x-large", 4), "XLAR")
        self.assertEqual(abbreviate("--", fallback="7"), "7")

    def test_prefix_falls_back_to_product_name(self):
        self.assertEqual(default_sku_prefix(None, "Tote bag"), "TOT")
        self.assertEqual(default_sku_prefix("  TB ", "Tote bag"), "TB")

    def test_base_sku_joins_abbreviations_in_axis_order(self):
        color = _axis(1, "color", ["Black"], 0, 1)
        size = _axis(2, "size", ["Large"], 1, 10)

        combo = cartesian_product([color, size])[0]

        self.assertEqual(base_sku("BAG", combo), "BAG-BLA-LAR")

    def test_allocator_suffixes_collisions(self):
        allocator = SkuAllocator({"BAG-BLA-LAR"})

        self.assertEqual(allocator.allocate("BAG-BLA-LAR"), "BAG-BLA-LAR-2")
        self.assertEqual(allocator.allocate("BAG-BLA-LAR"), "BAG-BLA-LAR-3")
        self.assertEqual(allocator.allocate("BAG-BLU-LAR"), "BAG-BLU-LAR")

    def test_allocator_gives_up_after_max_attempts(self):
        allocator = SkuAllocator({"A-B", "A-B-2", "A-B-3"}, max_attempts=3)

        with self.assertRaises(SKUCollisionUnresolved) as ctx:
            allocator.allocate("A-B")
        self.assertEqual(ctx.exception.attempts, 3)


class ComputedValuesTest(unittest.TestCase):
    def test_price_and_weight_sum_modifiers(self):
        options = [
            AxisOption(id=1, value="Leather", display_value="Leather", price_modifier=Decimal("12.50"), weight_modifier=200),
            AxisOption(id=2, value="Large", display_value="Large", price_modifier=Decimal("-2.00")),
        ]

        self.assertEqual(computed_price(Decimal("40.00"), options), Decimal("50.50"))
        self.assertEqual(computed_weight(500, options), 700)


if __name__ == "__main__":
    unittest.main()
