"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_SECRETS: Final[frozenset[str]] = frozenset(
    {"CHANGE_ME", "CHANGE_ME_JWT", "CHANGE_ME_REFRESH", "CHANGE_ME_RESET"}
)

# Loads .env during development (no-op when the file is missing)
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


def build_engine_options(database_uri: str, timeout_seconds: int) -> dict[str, Any]:
    """Return SQLAlchemy engine options that bound every store round trip.

    Parameters
    ----------
    database_uri: str
        Connection string; the dialect decides which knobs apply.
    timeout_seconds: int
        Upper bound for acquiring a connection and for a single statement.

    Returns
    -------
    dict[str, Any]
        Keyword arguments for :func:`sqlalchemy.create_engine`.

    Notes
    -----
    SQLite in-memory engines use a static pool that rejects ``pool_timeout``,
    so only the driver-level busy timeout is set there.
    """
    if database_uri.startswith("sqlite"):
        return {"connect_args": {"timeout": timeout_seconds}}

    options: dict[str, Any] = {"pool_pre_ping": True, "pool_timeout": timeout_seconds}
    if database_uri.startswith("postgresql"):
        options["connect_args"] = {
            "connect_timeout": timeout_seconds,
            "options": f"-c statement_timeout={timeout_seconds * 1000}",
        }
    elif database_uri.startswith(("mysql", "mariadb")):
        options["connect_args"] = {
            "connect_timeout": timeout_seconds,
            "read_timeout": timeout_seconds,
            "write_timeout": timeout_seconds,
        }
    return options


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder.
    JWT_SECRET_KEY: str
        Signing secret for access tokens.
    JWT_REFRESH_SECRET_KEY: str
        Signing secret for refresh tokens.
    JWT_RESET_SECRET_KEY: str
        Signing secret for password-reset tokens. Kept apart from the access
        secret so a reset token never verifies as an access token.
    JWT_ALGORITHM: str
        HMAC algorithm used by every token domain.
    ACCESS_TOKEN_EXPIRES_SECONDS / REFRESH_TOKEN_EXPIRES_SECONDS /
    RESET_TOKEN_EXPIRES_SECONDS: int
        Default lifetimes per token domain.
    PASSWORD_MIN_LENGTH: int
        Minimum accepted password length.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method (``scrypt`` or ``pbkdf2:sha256:<rounds>``).
    PASSWORD_SALT_LENGTH: int
        Per-secret random salt length.
    AUTH_REVEAL_UNKNOWN_ACCOUNTS: bool
        When ``True`` login distinguishes "no such user" from "wrong password".
    AUTH_ALLOW_ROLE_REQUESTS: bool
        When ``True`` the public signup endpoint forwards requested roles.
    AUTH_EXPOSE_RESET_TOKEN: bool
        When ``True`` the forgot-password endpoint returns the reset token in
        its body. Only meant for environments without an email channel.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    SQLALCHEMY_ENGINE_OPTIONS: dict
        Engine options carrying the store timeouts.
    REDIS_URL: str | None
        Redis connection string; enables the Redis revocation backend.
    REVOCATION_BACKEND: str
        ``"redis"`` or ``"sql"``. Defaults to Redis when ``REDIS_URL`` is set.
    STORE_TIMEOUT_SECONDS: int
        Bound applied to database and Redis round trips.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
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
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_REFRESH_SECRET_KEY = os.getenv("JWT_REFRESH_SECRET_KEY", "CHANGE_ME_REFRESH")
    JWT_RESET_SECRET_KEY = os.getenv("JWT_RESET_SECRET_KEY", "CHANGE_ME_RESET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

    # Token lifetimes
    ACCESS_TOKEN_EXPIRES_SECONDS = env_int("ACCESS_TOKEN_EXPIRES_SECONDS", 86400)
    REFRESH_TOKEN_EXPIRES_SECONDS = env_int("REFRESH_TOKEN_EXPIRES_SECONDS", 7 * 86400)
    RESET_TOKEN_EXPIRES_SECONDS = env_int("RESET_TOKEN_EXPIRES_SECONDS", 3600)

    # Credentials policy
    PASSWORD_MIN_LENGTH = env_int("PASSWORD_MIN_LENGTH", 6)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")
    PASSWORD_SALT_LENGTH = env_int("PASSWORD_SALT_LENGTH", 16)
    AUTH_REVEAL_UNKNOWN_ACCOUNTS = env_bool("AUTH_REVEAL_UNKNOWN_ACCOUNTS", False)
    AUTH_ALLOW_ROLE_REQUESTS = env_bool("AUTH_ALLOW_ROLE_REQUESTS", False)
    AUTH_EXPOSE_RESET_TOKEN = env_bool("AUTH_EXPOSE_RESET_TOKEN", False)

    # Stores
    STORE_TIMEOUT_SECONDS = env_int("STORE_TIMEOUT_SECONDS", 5)
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(
        SQLALCHEMY_DATABASE_URI, STORE_TIMEOUT_SECONDS
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REDIS_URL = os.getenv("REDIS_URL") or None
    REVOCATION_BACKEND = os.getenv("REVOCATION_BACKEND", "redis" if REDIS_URL else "sql")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
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
    AUTH_EXPOSE_RESET_TOKEN = env_bool("AUTH_EXPOSE_RESET_TOKEN", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Uses a cheap PBKDF2 cost so hashing does not dominate test time.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = build_engine_options(
        SQLALCHEMY_DATABASE_URI, BaseConfig.STORE_TIMEOUT_SECONDS
    )
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    JWT_SECRET_KEY = "testing-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET_KEY = "testing-refresh-secret-0123456789abcdef"
    JWT_RESET_SECRET_KEY = "testing-reset-secret-0123456789abcdef"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    REDIS_URL = None
    REVOCATION_BACKEND = "sql"
    AUTH_EXPOSE_RESET_TOKEN = True
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. :func:`validate_secrets` refuses to
    boot with any placeholder signing secret.
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


def validate_secrets(config: Mapping[str, Any]) -> None:
    """Reject placeholder or shared signing secrets outside debug/testing.

    :param config: Loaded Flask configuration mapping.
    :raises RuntimeError: When a secret is a placeholder or two token domains share one.
    """
    if config.get("DEBUG") or config.get("TESTING"):
        return
    keys = ("SECRET_KEY", "JWT_SECRET_KEY", "JWT_REFRESH_SECRET_KEY", "JWT_RESET_SECRET_KEY")
    placeholders = [k for k in keys if config.get(k) in PLACEHOLDER_SECRETS]
    if placeholders:
        raise RuntimeError(f"Refusing to start with placeholder secrets: {placeholders}")
    token_secrets = [config.get(k) for k in keys[1:]]
    if len(set(token_secrets)) != len(token_secrets):
        raise RuntimeError("Access, refresh and reset tokens must use distinct secrets.")
