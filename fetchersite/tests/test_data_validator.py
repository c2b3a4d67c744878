from django.test import SimpleTestCase

from countries.exceptions import DecodeError
from countries.models import Country
from countries.services.data_validator import DataValidator, CountryDataValidationError

class DataValidatorTests(SimpleTestCase):
    def setUp(self):
        self.valid_row = {
            "name": "Wonderland",
            "region": "Fiction",
            "alpha2Code": "WL",
            "population": 123456,
            "topLevelDomain": [".wl"],
            "capital": "Heart City",
        }

    def test_valid_row_passes_and_drops_unknown_fields(self):
        country = DataValidator.validate_row(self.valid_row.copy(), index=0)
        self.assertEqual(
            country,
            Country(name="Wonderland", population=123456, region="Fiction", capital="Heart City"),
        )

    def test_missing_required_keys_raises(self):
        bad = self.valid_row.copy()
        bad.pop("population")
        with self.assertRaises(CountryDataValidationError):
            DataValidator.validate_row(bad, index=1)

    def test_validation_error_is_a_decode_error(self):
        self.assertTrue(issubclass(CountryDataValidationError, DecodeError))

    def test_empty_or_missing_capital_becomes_empty_string(self):
        row = self.valid_row.copy()
        row["capital"] = ""
        self.assertEqual(DataValidator.validate_row(row, index=2).capital, "")

        row.pop("capital")
        self.assertEqual(DataValidator.validate_row(row, index=3).capital, "")

        row["capital"] = None
        self.assertEqual(DataValidator.validate_row(row, index=4).capital, "")

    def test_population_must_be_non_negative_int(self):
        row = self.valid_row.copy()
        row["population"] = -1
        with self.assertRaises(CountryDataValidationError):
            DataValidator.validate_row(row, index=5)

        row["population"] = "lots"
        with self.assertRaises(CountryDataValidationError):
            DataValidator.validate_row(row, index=6)

    def test_name_must_be_a_string(self):
        # v3 of the API nests the name in an object
        row = self.valid_row.copy()
        row["name"] = {"common": "Wonderland"}
        with self.assertRaises(CountryDataValidationError):
            DataValidator.validate_row(row, index=7)

    def test_non_object_row_rejected(self):
        with self.assertRaises(CountryDataValidationError):
            DataValidator.validate_row(["Wonderland"], index=8)

    def test_decode_array_and_single_object(self):
        other = dict(self.valid_row, name="Looking Glass")
        self.assertEqual(len(DataValidator.decode_countries([self.valid_row, other])), 2)

        single = DataValidator.decode_countries(self.valid_row)
        self.assertEqual(len(single), 1)
        self.assertEqual(single[0].name, "Wonderland")

    def test_decode_empty_array_is_empty(self):
        self.assertEqual(DataValidator.decode_countries([]), [])

    def test_decode_rejects_other_shapes(self):
        for payload in ("Wonderland", 42, None):
            with self.assertRaises(CountryDataValidationError):
                DataValidator.decode_countries(payload)

    def test_upstream_error_object_rejected(self):
        # What the API returns for an unknown name
        with self.assertRaises(CountryDataValidationError):
            DataValidator.decode_countries({"status": 404, "message": "Not Found"})

    def test_long_values_are_accepted(self):
        row = self.valid_row.copy()
        row["name"] = "The United Kingdom of Great Britain and Northern Ireland " * 5
        row["region"] = "R" * 300
        row["capital"] = "C" * 300
        country = DataValidator.validate_row(row, index=9)
        self.assertEqual(country.name, row["name"].strip())
        self.assertEqual(len(country.region), 300)
        self.assertEqual(len(country.capital), 300)
