"""Shared API helpers: bearer extraction, guard decorators and responses."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from authcore.core.components import get_components
from authcore.services.authorization.dto import Principal

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_TOKEN_HEADER = "x-access-token"
BEARER_PREFIX = "bearer "
PRINCIPAL_KEY = "authcore.principal"


def bearer_token() -> str | None:
    """Return the token from ``Authorization: Bearer`` or ``x-access-token``."""

    header = request.headers.get("Authorization", "")
    if header.lower().startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX) :].strip()
        if token:
            return token
    return request.headers.get(ACCESS_TOKEN_HEADER) or None


def current_principal() -> Principal:
    """Return the principal set by one of the guard decorators."""

    return cast(Principal, request.environ[PRINCIPAL_KEY])


def _guarded(
    func: F,
    *,
    roles: Iterable[str] | None = None,
    require_all: bool = False,
    owner_param: str | None = None,
) -> F:
    role_list = tuple(roles or ())

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        owner_id = kwargs.get(owner_param) if owner_param else None
        request.environ[PRINCIPAL_KEY] = get_components().guard.authorize(
            bearer_token(),
            roles=role_list or None,
            require_all=require_all,
            owner_id=owner_id,
        )
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_auth(func: F) -> F:
    """Ensure the request carries a valid, unrevoked access token."""

    return _guarded(func)


def require_roles(*roles: str, require_all: bool = False) -> Callable[[F], F]:
    """Ensure the caller holds one of ``roles`` (or all with ``require_all``)."""

    def decorator(func: F) -> F:
        return _guarded(func, roles=roles, require_all=require_all)

    return decorator


def require_owner_or_admin(param: str = "account_id") -> Callable[[F], F]:
    """Ensure the caller owns the account named by the ``param`` URL variable, or is admin."""

    def decorator(func: F) -> F:
        return _guarded(func, owner_param=param)

    return decorator


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
