import unittest
from decimal import Decimal

from configurator.core.errors import InvalidMetadata
from configurator.core.metadata import MetadataField, metadata_decimal, validate_metadata


class MetadataValidationTest(unittest.TestCase):
    def setUp(self):
        self.fields = [
            MetadataField("surcharge", "number"),
            MetadataField("washable", "boolean", default_value="true"),
            MetadataField("origin", "select", is_required=True, select_options=("IT", "PT")),
            MetadataField("spec_sheet", "url"),
            MetadataField("care", "text"),
        ]

    def test_values_are_normalised(self):
        clean = validate_metadata(
            self.fields,
            {"surcharge": 4.5, "washable": "no", "origin": "IT", "spec_sheet": "https://example.com/a.pdf"},
        )

        self.assertEqual(
            clean,
            {
                "surcharge": "4.5",
                "washable": False,
                "origin": "IT",
                "spec_sheet": "https://example.com/a.pdf",
            },
        )

    def test_defaults_fill_missing_values(self):
        clean = validate_metadata(self.fields, {"origin": "PT"})

        self.assertIs(clean["washable"], True)
        self.assertNotIn("care", clean)

    def test_required_field_missing(self):
        with self.assertRaises(InvalidMetadata):
            validate_metadata(self.fields, {})

    def test_unknown_key_is_rejected(self):
        with self.assertRaises(InvalidMetadata):
            validate_metadata(self.fields, {"origin": "IT", "colour": "red"})

    def test_bad_values_are_rejected(self):
        for values in (
            {"origin": "FR"},
            {"origin": "IT", "surcharge": "cheap"},
            {"origin": "IT", "surcharge": True},
            {"origin": "IT", "washable": "maybe"},
            {"origin": "IT", "spec_sheet": "ftp://example.com/a.pdf"},
        ):
            with self.subTest(values=values):
                with self.assertRaises(InvalidMetadata):
                    validate_metadata(self.fields, values)

    def test_metadata_decimal(self):
        self.assertEqual(metadata_decimal({"surcharge": "4.5"}, "surcharge"), Decimal("4.5"))
        self.assertIsNone(metadata_decimal({"surcharge": "4.5"}, None))
        self.assertIsNone(metadata_decimal({}, "surcharge"))
        self.assertIsNone(metadata_decimal({"surcharge": "n/a"}, "surcharge"))


if __name__ == "__main__":
    unittest.main()
