# countries/services/region_stats.py
from typing import Sequence

from countries.exceptions import CallerContractError, EmptyResultError
from countries.models import Country, Region
from countries.queries import QueryKind


def reduce_region(query, countries: Sequence[Country]) -> Region:
    """
    Computes region statistics: total population and average population
    per country over the given countries.

    Args:
        query (RegionQuery): The region query the countries were fetched for.
            The region name is taken from it, not from the country records,
            which may report heterogeneous regions.
        countries (Sequence[Country]): Countries already truncated to the
            requested maximum.

    Returns:
        Region: The aggregated region.

    Raises:
        CallerContractError: If query is not a region query.
        EmptyResultError: If countries is empty (the average is undefined).
    """
    if getattr(query, "kind", None) is not QueryKind.REGION:
        raise CallerContractError(
            f"reduce_region requires a RegionQuery; got {type(query).__name__}"
        )
    if not countries:
        raise EmptyResultError(f"No countries to aggregate for region {query.region}")

    total_population = sum(c.population for c in countries)
    return Region(
        name=query.region,
        countries=tuple(countries),
        total_population=total_population,
        avg_population=total_population / len(countries),
    )
