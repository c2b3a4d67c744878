from typing import Any, List
import logging

from countries.exceptions import DecodeError
from countries.models import Country
from countries.validators import CountryRowForm

logger = logging.getLogger(__name__)


class CountryDataValidationError(DecodeError):
    """Raised when a country object from the API fails validation."""
    pass


class DataValidator:
    """
    Turns decoded JSON from the country API into Country records.
    Accepts both shapes the API produces: an array of objects, or a
    bare object for single-match lookups (by code, by exact name).
    """

    REQUIRED_KEYS = {"name", "population"}

    @staticmethod
    def validate_row(row: Any, index: int) -> Country:
        """
        Validate a single decoded object and return a Country.

        - Ensures the row is an object with the required keys.
        - Uses CountryRowForm for field-level validation & normalization.
        - Normalizes missing/null capital and region -> "".
        """
        if not isinstance(row, dict):
            raise CountryDataValidationError(
                f"Row {index} is not a JSON object: {type(row).__name__}"
            )

        missing = DataValidator.REQUIRED_KEYS - set(row.keys())
        if missing:
            raise CountryDataValidationError(
                f"Row {index} missing required keys: {sorted(missing)}"
            )

        if not isinstance(row["name"], str):
            raise CountryDataValidationError(
                f"Row {index} invalid: name must be a string"
            )

        form_data = {
            "name": row.get("name"),
            "region": row.get("region") or "",
            "population": row.get("population"),
            "capital": row.get("capital") or "",
        }

        form = CountryRowForm(data=form_data)
        if not form.is_valid():
            logger.debug("Row %s form errors: %s", index, form.errors.as_json())
            raise CountryDataValidationError(
                f"Row {index} invalid: {form.errors.as_json()}"
            )

        cleaned = form.cleaned_data
        return Country(
            name=cleaned["name"],
            population=cleaned["population"],
            region=cleaned["region"],
            capital=cleaned["capital"],
        )

    @staticmethod
    def decode_countries(payload: Any) -> List[Country]:
        """
        Decode a parsed JSON payload into a list of countries.

        An array is decoded element by element; a single object is wrapped
        into a one-element list. Anything else raises CountryDataValidationError.
        """
        if isinstance(payload, list):
            return [
                DataValidator.validate_row(row, idx)
                for idx, row in enumerate(payload)
            ]
        if isinstance(payload, dict):
            return [DataValidator.validate_row(payload, 0)]
        raise CountryDataValidationError(
            f"Expected a JSON array or object, got {type(payload).__name__}"
        )
