import json
import logging
import time
from typing import List, Optional

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException, Timeout
from urllib3.exceptions import HTTPError as URLLib3Error
from urllib3.exceptions import ReadTimeoutError

from countries.exceptions import (
    DecodeError,
    EmptyResultError,
    FetchTimeoutError,
    TransportError,
)
from countries.models import Country
from countries.services.config import FetcherConfig
from countries.services.data_validator import DataValidator

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def build_session(pool_size: int) -> requests.Session:
    """
    Session shared by all concurrent fetches. The adapter's pool is sized so
    that parallel queries to the same host each get their own connection.
    """
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _is_timeout(exc: BaseException) -> bool:
    """
    True for read/connect timeouts, including the ConnectionError that
    requests raises when the socket times out while the body is being read.
    """
    if isinstance(exc, (Timeout, ReadTimeoutError, TimeoutError)):
        return True
    return any(isinstance(arg, ReadTimeoutError) for arg in getattr(exc, "args", ()))


def _set_read_timeout(response: requests.Response, seconds: float) -> None:
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is not None:
        sock.settimeout(seconds)


class APIClient:
    """
    Service for fetching country data from the REST countries API.
    One GET per query, single attempt, bounded by a timeout.
    """

    def __init__(
        self,
        config: FetcherConfig,
        session: Optional[requests.Session] = None,
    ):
        self.config = config
        self.session = session if session is not None else build_session(config.pool_size)

    def _read_body(self, response: requests.Response, deadline: float, url: str) -> bytes:
        """
        Read the streamed body until EOF or the deadline. Each read returns
        as soon as any bytes arrive and may block at most until the deadline.
        """
        chunks = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchTimeoutError(f"Deadline exceeded reading body from {url}")
            _set_read_timeout(response, remaining)
            chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    def fetch(self, query, limit: int, timeout: Optional[float] = None) -> List[Country]:
        """
        Fetch the countries matching a query.

        Args:
            query: NameQuery, CodeQuery or RegionQuery.
            limit: Maximum number of countries to return; <= 0 means all.
            timeout: Seconds the whole round trip (connect, headers and body)
                may take; defaults to the configured timeout.

        Returns:
            List of Country, in the order the API returned them.

        Raises:
            FetchTimeoutError: The request exceeded the timeout.
            TransportError: Network error, non-2xx status or unreadable body.
            DecodeError: Body is neither an array of countries nor one country.
            EmptyResultError: No countries matched.
        """
        url = query.build_target(self.config.base_url)
        timeout = self.config.timeout if timeout is None else timeout
        deadline = time.monotonic() + timeout

        logger.debug("Fetching country data from %s", url)
        try:
            response = self.session.get(url, timeout=timeout, stream=True)
            try:
                response.raise_for_status()
                body = self._read_body(response, deadline, url)
            finally:
                response.close()
        except FetchTimeoutError:
            logger.warning("Timed out after %ss fetching %s", timeout, url)
            raise
        except (RequestException, URLLib3Error, OSError) as e:
            if _is_timeout(e):
                logger.warning("Timed out after %ss fetching %s", timeout, url)
                raise FetchTimeoutError(f"Timed out after {timeout}s fetching {url}") from e
            logger.error("Network error fetching %s: %s", url, e)
            raise TransportError(f"Network error fetching {url}: {e}") from e

        try:
            payload = json.loads(body)
        except ValueError as e:
            logger.error("Invalid JSON from %s (%s bytes)", url, len(body))
            raise DecodeError(f"Response from {url} is not valid JSON") from e

        try:
            countries = DataValidator.decode_countries(payload)
        except DecodeError as e:
            logger.error("Invalid API response from %s: %s", url, e)
            raise

        if not countries:
            logger.warning("API returned no countries for %s", url)
            raise EmptyResultError(f"No countries matched {query}")

        logger.info("Fetched %s country records from %s", len(countries), url)

        # limit <= 0 means unbounded, e.g. all countries in a region
        if limit > 0:
            countries = countries[:limit]

        return countries
