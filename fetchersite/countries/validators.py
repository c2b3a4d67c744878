from django import forms
from django.core.exceptions import ValidationError


# =========================
# Row validation for decoded API records
# =========================
class CountryRowForm(forms.Form):
    """
    Validates a single country object coming from the upstream API.
    Only the fields the fetcher keeps are declared; everything else is ignored.
    """
    name = forms.CharField(strip=True, min_length=1)
    # Upstream data quality varies; some territories report an empty region
    region = forms.CharField(required=False, strip=True)
    population = forms.IntegerField(min_value=0)
    capital = forms.CharField(required=False, strip=True)

    def clean_population(self):
        value = self.cleaned_data["population"]
        raw = self.data.get("population")
        # IntegerField happily accepts "12.0" or True; the API sends plain ints
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValidationError("population must be an integer.")
        return value

    def clean_region(self):
        return self.cleaned_data.get("region") or ""

    def clean_capital(self):
        # Missing/null capital is normalized to an empty string
        return self.cleaned_data.get("capital") or ""
