"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They serve as stable contracts between repositories,
infrastructure adapters and application services.

The translation to HTTP responses (RFC 7807) is handled by
``authcore/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_accounts_email').
    column : str, optional
        ``table.column`` fallback for dialects (SQLite) whose messages carry
        the column instead of the constraint name.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - ``authcore.core.errors`` translates them into problem responses.
    """

    pass


# --------------------------------------------------------------------------- #
# Input and persistence errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationFailedError(ServiceError):
    """
    Raised when candidate input fails local validation.

    :param errors: Field name mapped to human-readable messages.
    :type errors: dict[str, list[str]]
    """

    errors: dict[str, list[str]] = field(default_factory=dict)

    def __str__(self) -> str:  # pragma: no cover
        return "Validation failed: " + ", ".join(sorted(self.errors))


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class DuplicateFieldError(ConflictError):
    """Raised when ``username`` or ``email`` is already taken."""

    def __init__(self, field_name: str, entity: str = "Account") -> None:
        super().__init__(entity=entity, detail=f"{field_name} already in use")
        self.field = field_name


class StoreUnavailableError(ServiceError):
    """
    Raised when a backing store fails or times out.

    :param store: Which store failed (``"database"`` or ``"redis"``).
    :param retry_after: Suggested seconds before retrying.
    """

    def __init__(self, store: str, *, retry_after: int = 1) -> None:
        super().__init__(f"{store} unavailable")
        self.store = store
        self.retry_after = retry_after


# --------------------------------------------------------------------------- #
# Authentication and authorization errors
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Raised when a username/password pair does not authenticate."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class AccountNotActiveError(ServiceError):
    """Raised when the account exists but its status is not ``active``."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Account is {status}")
        self.status = status


class InvalidTokenError(ServiceError):
    """Base for every token verification failure."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class TokenMalformedError(InvalidTokenError):
    """Token cannot be decoded or belongs to another token domain."""

    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message)


class TokenSignatureError(InvalidTokenError):
    """Token signature does not match the domain secret."""

    def __init__(self, message: str = "Invalid token signature") -> None:
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Token ``exp`` is not after the current time."""

    def __init__(self, message: str = "Token expired") -> None:
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised by the guard when a request carries no valid credential."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class ForbiddenError(ServiceError):
    """Raised by the guard when a valid principal lacks a role or ownership."""

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)
