"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Loads .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    """Parse a number of seconds from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: float
        Value returned when the variable is unset or blank.

    Raises
    ------
    ValueError
        When the value is set but not a number.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return float(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development-safe placeholder.
    PORTAL_API_URL: str
        Base URL of the upstream portal REST service.
    PORTAL_HTTP_TIMEOUT: float
        Per-request timeout (seconds) applied to every upstream call.
    STATUS_POLL_INTERVAL: float
        Seconds between status queries for a pending employer.
    PAYMENT_SETTLEMENT_DELAY: float
        Simulated gateway latency in seconds.
    DASHBOARD_REDIRECT_DELAY: float
        Seconds between a paid registration and the dashboard redirect.
    SESSION_TTL_SECONDS: int
        Lifetime of the persisted session user record.
    REDIS_URL: str | None
        When set, session users live in Redis; otherwise in process memory.
    SUPPORT_EMAIL: str
        Contact shown to rejected employers.
    JSON_SORT_KEYS: bool
        Keeps JSON output order stable when ``False``.
    PROPAGATE_EXCEPTIONS: bool
        Controls Flask error propagation.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    DEBUG: bool
        Toggles Flask debug mode.
    TESTING: bool
        Enables Flask testing mode when ``True``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Upstream
    PORTAL_API_URL = os.getenv("PORTAL_API_URL", "https://weerp.wewinlimited.com/api")
    PORTAL_HTTP_TIMEOUT = env_float("PORTAL_HTTP_TIMEOUT", 10.0)

    # Onboarding timings
    STATUS_POLL_INTERVAL = env_float("STATUS_POLL_INTERVAL", 60.0)
    PAYMENT_SETTLEMENT_DELAY = env_float("PAYMENT_SETTLEMENT_DELAY", 1.5)
    DASHBOARD_REDIRECT_DELAY = env_float("DASHBOARD_REDIRECT_DELAY", 3.0)

    # Session
    SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "1800"))
    REDIS_URL = os.getenv("REDIS_URL") or None

    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@wewinerp.com")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", False)

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Points at a fake upstream URL and zeroes every delay.
    - Never uses Redis unless ``TEST_REDIS_URL`` is set.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    PORTAL_API_URL = "https://portal.test/api"
    PORTAL_HTTP_TIMEOUT = 1.0
    STATUS_POLL_INTERVAL = 0.0
    PAYMENT_SETTLEMENT_DELAY = 0.0
    DASHBOARD_REDIRECT_DELAY = 0.0
    REDIS_URL = os.getenv("TEST_REDIS_URL") or None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled while relying on WSGI-level log configuration for
    noise control.
    """

    DEBUG = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
