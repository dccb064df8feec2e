import unittest
from decimal import Decimal

from configurator.core.axes import (
    AxisOption,
    OptionSelection,
    global_axis,
    order_axes,
    product_axis,
)
from configurator.core.errors import DuplicateAxisKey


def _options(*values, start_id=1):
    return [
        AxisOption(id=start_id + index, value=value, display_value=value, position=index)
        for index, value in enumerate(values)
    ]


class AxisOrderingTest(unittest.TestCase):
    def test_axes_interleave_by_position_product_first_on_tie(self):
        color = product_axis(1, "color", "Color", 1, _options("Black", "White"))
        size = product_axis(2, "size", "Size", 0, _options("S", "M", start_id=10))
        lining = global_axis(7, "lining", "Lining", 1, _options("Silk", start_id=20))

        usable, empty = order_axes([lining, color, size])

        self.assertEqual([axis.key for axis in usable], ["size", "color", "lining"])
        self.assertEqual(empty, [])

    def test_axes_without_active_options_are_reported_as_empty(self):
        inactive = [AxisOption(id=1, value="Red", display_value="Red", is_active=False)]
        color = product_axis(1, "color", "Color", 0, inactive)
        size = product_axis(2, "size", "Size", 1, _options("S", start_id=5))

        usable, empty = order_axes([color, size])

        self.assertEqual([axis.key for axis in usable], ["size"])
        self.assertEqual([axis.key for axis in empty], ["color"])

    def test_duplicate_key_across_sources_is_rejected(self):
        color = product_axis(1, "color", "Color", 0, _options("Black"))
        also_color = global_axis(3, "color", "Colour", 1, _options("Blue", start_id=9))

        with self.assertRaises(DuplicateAxisKey) as ctx:
            order_axes([color, also_color])
        self.assertEqual(ctx.exception.key, "color")

    def test_empty_axis_does_not_clash_with_a_live_key(self):
        inactive = [AxisOption(id=1, value="Red", display_value="Red", is_active=False)]
        color = product_axis(1, "color", "Color", 0, inactive)
        navy = global_axis(3, "color", "Colour", 1, _options("Navy", start_id=9))

        usable, empty = order_axes([color, navy])

        self.assertEqual([(axis.source, axis.key) for axis in usable], [("global", "color")])
        self.assertEqual([(axis.source, axis.key) for axis in empty], [("product", "color")])

    def test_options_are_ordered_by_position_then_id(self):
        options = [
            AxisOption(id=3, value="L", display_value="L", position=1),
            AxisOption(id=2, value="M", display_value="M", position=1),
            AxisOption(id=9, value="S", display_value="S", position=0),
        ]
        axis = product_axis(1, "size", "Size", 0, options)

        self.assertEqual([option.value for option in axis.options], ["S", "M", "L"])


class GlobalSelectionTest(unittest.TestCase):
    def setUp(self):
        self.options = [
            AxisOption(id=1, value="Cotton", display_value="Cotton", position=0, price_modifier=Decimal("1.00")),
            AxisOption(id=2, value="Linen", display_value="Linen", position=1, price_modifier=Decimal("2.00")),
            AxisOption(id=3, value="Wool", display_value="Wool", position=2, is_active=False),
        ]

    def test_no_selections_means_every_active_option(self):
        axis = global_axis(5, "fabric", "Fabric", 0, self.options)

        self.assertEqual([option.id for option in axis.options], [1, 2])
        self.assertEqual(axis.options[1].price_modifier, Decimal("2.00"))

    def test_selections_filter_and_override(self):
        selections = [
            OptionSelection(option_id=2, price_modifier=Decimal("5.50"), position_override=-1),
            OptionSelection(option_id=1),
        ]
        axis = global_axis(5, "fabric", "Fabric", 0, self.options, selections)

        self.assertEqual([option.id for option in axis.options], [2, 1])
        self.assertEqual(axis.options[0].price_modifier, Decimal("5.50"))
        self.assertEqual(axis.options[1].price_modifier, Decimal("1.00"))
        # the shared option itself is untouched
        self.assertEqual(self.options[1].price_modifier, Decimal("2.00"))

    def test_selected_inactive_option_stays_out(self):
        axis = global_axis(5, "fabric", "Fabric", 0, self.options, [OptionSelection(option_id=3)])

        self.assertEqual(axis.options, [])

    def test_option_refs_use_link_id(self):
        axis = global_axis(5, "fabric", "Fabric", 0, self.options)

        self.assertEqual(axis.ref(axis.options[0]).token, "g5:1")


if __name__ == "__main__":
    unittest.main()
