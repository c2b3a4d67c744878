from dataclasses import dataclass
from typing import Tuple

from countries.exceptions import EmptyResultError


@dataclass(frozen=True)
class Country:
    """
    A country as returned by the upstream API.
    Only the fields the fetcher cares about are kept; unknown fields are ignored.
    """
    name: str
    population: int
    region: str
    capital: str = ""

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Region:
    """
    Aggregate statistics for a geographical region.
    The name comes from the region query, not from the country records.
    Built by reduce_region, which refuses an empty country list.
    """
    name: str
    countries: Tuple[Country, ...]
    total_population: int
    avg_population: float

    def __post_init__(self):
        if not self.countries:
            raise EmptyResultError(f"Region {self.name} has no countries")

    def __str__(self):
        return self.name
