import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings

from countries.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Go-style durations: "300ms", "10s", "1m30s", "1.5h"
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_TRUE = {"1", "true", "t", "yes", "y", "on"}
_FALSE = {"0", "false", "f", "no", "n", "off"}


def parse_duration(value: str) -> float:
    """
    Parse a duration string such as "10s" or "1m30s" into seconds.

    Raises:
        ConfigError: if the string is malformed or not strictly positive.
    """
    text = (value or "").strip()
    pos = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise ConfigError(f"Could not parse duration: {value!r}")
    if total <= 0:
        raise ConfigError(f"Duration must be positive: {value!r}")
    return total


def parse_log_level(value: str) -> int:
    try:
        return LOG_LEVELS[(value or "").strip().upper()]
    except KeyError:
        raise ConfigError(f"Could not parse log level: {value!r}") from None


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Could not parse boolean: {value!r}")


def parse_permission(value: Any) -> int:
    """Permission bits are given in decimal (420 == 0o644)."""
    try:
        perm = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Could not parse file permission: {value!r}") from None
    if not 0 <= perm <= 0o777:
        raise ConfigError(f"File permission out of range: {value!r}")
    return perm


def parse_positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Could not parse {name}: {value!r}") from None
    if number <= 0:
        raise ConfigError(f"{name} must be a positive integer: {value!r}")
    return number


@dataclass(frozen=True)
class FetcherConfig:
    """
    Runtime configuration, built once at startup and passed explicitly to
    the API client, dispatcher and output layer.
    """
    base_url: str = "https://restcountries.com/v2"
    timeout: float = 10.0
    pool_size: int = 32
    json_prefix: str = ""
    json_indent: str = "  "
    json_file_permission: int = 0o644
    json_force_override: bool = True
    log_level: int = logging.INFO

    @classmethod
    def from_settings(cls, source: Optional[Any] = None) -> "FetcherConfig":
        """
        Build a config from Django settings (FETCHER_* values).

        Raises:
            ConfigError: on any malformed value; nothing has been fetched yet.
        """
        source = source if source is not None else settings
        base_url = getattr(source, "FETCHER_BASE_URL", cls.base_url)
        if not base_url:
            raise ConfigError("FETCHER_BASE_URL must not be empty")

        config = cls(
            base_url=base_url,
            timeout=parse_duration(getattr(source, "FETCHER_HTTP_TIMEOUT", "10s")),
            pool_size=parse_positive_int(
                getattr(source, "FETCHER_HTTP_POOL_SIZE", cls.pool_size),
                "FETCHER_HTTP_POOL_SIZE",
            ),
            json_prefix=getattr(source, "FETCHER_JSON_PREFIX", cls.json_prefix),
            json_indent=getattr(source, "FETCHER_JSON_INDENT", cls.json_indent),
            json_file_permission=parse_permission(
                getattr(source, "FETCHER_JSON_FILE_PERMISSION", 420)
            ),
            json_force_override=parse_bool(
                getattr(source, "FETCHER_JSON_FORCE_OVERRIDE", True)
            ),
            log_level=parse_log_level(getattr(source, "FETCHER_LOG_LEVEL", "INFO")),
        )
        logger.debug("Loaded config: %s", config)
        return config

    def apply_log_level(self) -> None:
        logging.getLogger("countries").setLevel(self.log_level)
