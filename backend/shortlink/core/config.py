"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
import string
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# 62 symbols: lower, upper, digit
DEFAULT_ALPHABET: Final[str] = string.ascii_lowercase + string.ascii_uppercase + string.digits

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


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    SECRET_KEY: str
        Flask secret used for session signing. Defaults to a development-safe
        placeholder and should be overridden in production.
    JWT_SECRET_KEY: str
        Key used by ``flask-jwt-extended`` for signing access tokens.
    JWT_ACCESS_TOKEN_EXPIRES: timedelta
        Lifetime of signed access tokens.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Redis connection string backing the validation cache. When unset the
        process-local in-memory cache is used.
    SHORT_CODE_LENGTH: int
        Number of symbols in generated short codes.
    SHORT_CODE_ALPHABET: str
        Symbols generated codes are drawn from.
    LINK_DEFAULT_TTL_DAYS: int
        Lifetime applied to links created without an explicit expiry.
    REFRESH_TOKEN_TTL_SECONDS: int
        Lifetime of issued refresh tokens.
    VALIDATION_CACHE_TTL_SECONDS: int
        How long a positive access-token validation is served from cache.
    SHORT_URL_BASE: str
        Public origin prepended to short codes by the presentation schema.
    CLICK_RECORDER_WORKERS: int
        Thread-pool size for background click increments.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=env_int("JWT_ACCESS_TOKEN_EXPIRES", 3600))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Cache
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Links & tokens
    SHORT_CODE_LENGTH = env_int("SHORT_CODE_LENGTH", 6)
    SHORT_CODE_ALPHABET = os.getenv("SHORT_CODE_ALPHABET", DEFAULT_ALPHABET)
    LINK_DEFAULT_TTL_DAYS = env_int("LINK_DEFAULT_TTL_DAYS", 365)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 24 * 60 * 60)
    VALIDATION_CACHE_TTL_SECONDS = env_int("VALIDATION_CACHE_TTL_SECONDS", 5 * 60)
    SHORT_URL_BASE = os.getenv("SHORT_URL_BASE", "http://localhost:8080")
    CLICK_RECORDER_WORKERS = env_int("CLICK_RECORDER_WORKERS", 4)

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    PROPAGATE_EXCEPTIONS = False
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never connects to Redis; the in-memory validation cache is used.
    - Records clicks inline (no worker pool) so counts are visible immediately.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = None
    CLICK_RECORDER_WORKERS = 0
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled while relying on WSGI-level log
    configuration for noise control.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
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


@dataclass(frozen=True, slots=True)
class CoreSettings:
    """
    Values the link/token core depends on, detached from Flask's config object.

    :param code_length: Symbols per generated short code.
    :param alphabet: Symbols generated codes are drawn from.
    :param link_ttl: Default link lifetime.
    :param refresh_ttl: Default refresh-token lifetime.
    :param validation_ttl: Positive validation cache lifetime.
    """

    code_length: int = 6
    alphabet: str = DEFAULT_ALPHABET
    link_ttl: timedelta = timedelta(days=365)
    refresh_ttl: timedelta = timedelta(hours=24)
    validation_ttl: timedelta = timedelta(minutes=5)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> CoreSettings:
        """Build settings from a Flask config mapping, keeping defaults for missing keys."""
        defaults = cls()
        return cls(
            code_length=int(config.get("SHORT_CODE_LENGTH", defaults.code_length)),
            alphabet=str(config.get("SHORT_CODE_ALPHABET", defaults.alphabet)),
            link_ttl=timedelta(
                days=int(config.get("LINK_DEFAULT_TTL_DAYS", defaults.link_ttl.days))
            ),
            refresh_ttl=timedelta(
                seconds=int(
                    config.get(
                        "REFRESH_TOKEN_TTL_SECONDS", defaults.refresh_ttl.total_seconds()
                    )
                )
            ),
            validation_ttl=timedelta(
                seconds=int(
                    config.get(
                        "VALIDATION_CACHE_TTL_SECONDS", defaults.validation_ttl.total_seconds()
                    )
                )
            ),
        )


def current_settings() -> CoreSettings:
    """Return settings from the active Flask app, or defaults outside an app context."""
    from flask import current_app, has_app_context

    if not has_app_context():
        return CoreSettings()
    return CoreSettings.from_config(current_app.config)
