"""
Django settings for fetchersite.

The fetcher has no database; everything it needs comes from FETCHER_*
environment variables and is validated by countries.services.config.
"""
import os

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "country-fetcher-not-a-secret")

DEBUG = False

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    "countries",
]

DATABASES = {}

USE_TZ = True

# --- Country fetcher ---
FETCHER_BASE_URL = os.getenv("FETCHER_BASE_URL", "https://restcountries.com/v2")
FETCHER_HTTP_TIMEOUT = os.getenv("FETCHER_HTTP_TIMEOUT", "10s")
FETCHER_HTTP_POOL_SIZE = os.getenv("FETCHER_HTTP_POOL_SIZE", "32")
FETCHER_JSON_PREFIX = os.getenv("FETCHER_JSON_PREFIX", "")
FETCHER_JSON_INDENT = os.getenv("FETCHER_JSON_INDENT", "  ")
FETCHER_JSON_FILE_PERMISSION = os.getenv("FETCHER_JSON_FILE_PERMISSION", "420")
FETCHER_JSON_FORCE_OVERRIDE = os.getenv("FETCHER_JSON_FORCE_OVERRIDE", "true")
FETCHER_LOG_LEVEL = os.getenv("FETCHER_LOG_LEVEL", "INFO")

# The countries logger level is set from FETCHER_LOG_LEVEL once the config
# has been validated (see FetcherConfig.apply_log_level).
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "%(asctime)s %(levelname)s %(name)s %(threadName)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "countries": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
