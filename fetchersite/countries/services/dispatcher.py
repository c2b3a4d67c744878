import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterator, List, Optional, Sequence, TypeVar, Union

from countries.exceptions import CallerContractError
from countries.models import Country, Region
from countries.queries import QueryKind
from countries.services.region_stats import reduce_region

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class FetchResult(Generic[R]):
    """Outcome of one dispatched unit: a value or the error it raised."""
    query: Any
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def fan_out(
    func: Callable[[T], R],
    items: Sequence[T],
    max_workers: Optional[int] = None,
) -> Iterator[FetchResult[R]]:
    """
    Run func(item) for every item in its own thread and yield one
    FetchResult per item in completion order.

    Every item is submitted before this function returns, so work starts
    immediately even if the caller drains later. The iterator is exhausted
    after exactly len(items) results; the pool is shut down afterwards.
    """
    items = list(items)
    if not items:
        return iter(())

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=max_workers or len(items),
        thread_name_prefix="fetch",
    )
    futures = {executor.submit(func, item): item for item in items}
    return _drain(executor, futures)


def _drain(executor, futures) -> Iterator[FetchResult]:
    try:
        for future in concurrent.futures.as_completed(futures):
            item = futures[future]
            try:
                yield FetchResult(query=item, value=future.result())
            except Exception as e:
                logger.debug("Unit for %s failed: %s", item, e)
                yield FetchResult(query=item, error=e)
    finally:
        executor.shutdown(wait=True)


class Dispatcher:
    """
    Runs one fetch (and, for regions, reduce) pipeline per query concurrently.
    A failure in one pipeline never affects its siblings.
    """

    def __init__(self, client, reducer: Callable[..., Region] = reduce_region):
        self.client = client
        self.reducer = reducer

    @staticmethod
    def batch_kind(queries: Sequence[Any]) -> QueryKind:
        """
        Return REGION for an all-region batch, else the kind of the first query.
        Mixed region/non-region batches are rejected.
        """
        if not queries:
            raise CallerContractError("dispatch requires at least one query")
        regions = [q.kind is QueryKind.REGION for q in queries]
        if any(regions) and not all(regions):
            raise CallerContractError(
                "Cannot mix region and non-region queries in one batch"
            )
        return queries[0].kind

    def dispatch(
        self,
        queries: Sequence[Any],
        limit: int,
        timeout: Optional[float] = None,
    ) -> Iterator[FetchResult[Union[List[Country], Region]]]:
        queries = list(queries)
        kind = self.batch_kind(queries)

        if kind is QueryKind.REGION:
            def unit(query):
                countries = self.client.fetch(query, limit, timeout)
                return self.reducer(query, countries)
        else:
            def unit(query):
                return self.client.fetch(query, limit, timeout)

        logger.info(
            "Dispatching %s %s queries (limit=%s)", len(queries), kind.value, limit
        )
        return fan_out(unit, queries)
