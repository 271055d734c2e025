"""Local credential validation shared by registration and profile updates."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from marshmallow import ValidationError
from marshmallow import validate as v

USERNAME_PATTERN = r"^[A-Za-z0-9_]{3,30}$"

username_validator = v.Regexp(
    USERNAME_PATTERN,
    error="Username must be 3-30 characters of letters, digits or underscore.",
)
email_validator = v.Email(error="Not a valid email address.")


def password_validator(min_length: int) -> v.Length:
    return v.Length(
        min=min_length, error=f"Password must be at least {min_length} characters."
    )


def collect(
    errors: dict[str, list[str]], field: str, check: Callable[[Any], Any], value: Any
) -> None:
    """Run ``check`` on ``value`` and record its messages under ``field``."""
    if not isinstance(value, str) or not value:
        errors.setdefault(field, []).append(f"{field.capitalize()} is required.")
        return
    try:
        check(value)
    except ValidationError as exc:
        messages = exc.messages if isinstance(exc.messages, list) else [str(exc.messages)]
        errors.setdefault(field, []).extend(str(m) for m in messages)


def validate_credentials(
    *,
    username: Any = None,
    email: Any = None,
    password: Any = None,
    min_password_length: int,
    fields: tuple[str, ...] = ("username", "email", "password"),
) -> dict[str, list[str]]:
    """
    Validate the requested credential fields.

    :param fields: Which of ``username``, ``email`` and ``password`` to check.
    :returns: Field name mapped to error messages; empty when everything passes.
    """
    errors: dict[str, list[str]] = {}
    if "username" in fields:
        collect(errors, "username", username_validator, username)
    if "email" in fields:
        normalized = email.strip() if isinstance(email, str) else email
        collect(errors, "email", email_validator, normalized)
    if "password" in fields:
        collect(errors, "password", password_validator(min_password_length), password)
    return errors
