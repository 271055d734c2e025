"""Build and expose the per-application service graph."""

from __future__ import annotations

from dataclasses import dataclass

from flask import Flask, current_app

from authcore.infra.jwt.jwt_token_provider import JWTTokenProvider
from authcore.infra.redis.redis_revocation_registry import RedisRevocationRegistry
from authcore.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from authcore.infra.sql.sql_revocation_registry import SQLRevocationRegistry
from authcore.services._shared.ports import (
    Clock,
    PasswordHasher,
    RevocationRegistry,
    SystemClock,
    TokenProvider,
)
from authcore.services.accounts.service import AccountService
from authcore.services.auth.dto import AuthSettings
from authcore.services.auth.service import AuthService
from authcore.services.authorization.guard import AuthorizationGuard
from authcore.services.roles.resolver import RoleResolver

EXTENSION_KEY = "authcore"


@dataclass(slots=True)
class Components:
    """Services and adapters shared by every request of one application."""

    clock: Clock
    tokens: TokenProvider
    hasher: PasswordHasher
    registry: RevocationRegistry
    roles: RoleResolver
    auth: AuthService
    accounts: AccountService
    guard: AuthorizationGuard


def build_revocation_registry(app: Flask, clock: Clock) -> RevocationRegistry:
    """Return the registry selected by ``REVOCATION_BACKEND``."""
    backend = str(app.config.get("REVOCATION_BACKEND", "sql")).lower()
    if backend == "redis":
        from authcore.core.extensions import get_redis

        return RedisRevocationRegistry(get_redis(), clock=clock)
    if backend == "sql":
        return SQLRevocationRegistry(clock=clock)
    raise RuntimeError(f"Unknown REVOCATION_BACKEND: {backend!r}")


def build_components(app: Flask, *, clock: Clock | None = None) -> Components:
    """
    Wire adapters and services from ``app.config``.

    :param app: Configured application.
    :param clock: Override for the wall clock (tests).
    :returns: The assembled components.
    """
    clock = clock or SystemClock()
    cfg = app.config
    tokens = JWTTokenProvider.from_config(cfg, clock=clock)
    hasher = WerkzeugPasswordHasher(
        method=cfg["PASSWORD_HASH_METHOD"], salt_length=int(cfg["PASSWORD_SALT_LENGTH"])
    )
    registry = build_revocation_registry(app, clock)
    roles = RoleResolver()
    settings = AuthSettings(
        password_min_length=int(cfg["PASSWORD_MIN_LENGTH"]),
        reveal_unknown_accounts=bool(cfg["AUTH_REVEAL_UNKNOWN_ACCOUNTS"]),
    )
    return Components(
        clock=clock,
        tokens=tokens,
        hasher=hasher,
        registry=registry,
        roles=roles,
        auth=AuthService(
            token_provider=tokens,
            password_hasher=hasher,
            revocation_registry=registry,
            role_resolver=roles,
            clock=clock,
            settings=settings,
        ),
        accounts=AccountService(
            role_resolver=roles,
            password_min_length=settings.password_min_length,
            clock=clock,
        ),
        guard=AuthorizationGuard(token_provider=tokens, revocation_registry=registry),
    )


def init_app(app: Flask) -> None:
    app.extensions[EXTENSION_KEY] = build_components(app)


def get_components() -> Components:
    """Return the components of the current application."""
    return current_app.extensions[EXTENSION_KEY]
