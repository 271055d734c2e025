# authcore/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from authcore.services.accounts.dto import AccountOut

# ---------------------------- Settings ------------------------------------ #


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Credential policy knobs.

    :param password_min_length: Minimum accepted password length.
    :param reveal_unknown_accounts: When ``True`` login reports an unknown
        username as ``NotFoundError`` instead of ``InvalidCredentialsError``.
    """

    password_min_length: int = 6
    reveal_unknown_accounts: bool = False


# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param username: Requested handle.
    :param email: Contact email (normalized on save).
    :param password: Raw password (hashed before it reaches the store).
    :param roles: Requested role names; unknown names are dropped.
    :param first_name, last_name, phone, date_of_birth, address: Optional
        profile fields stored with the account.
    """

    username: str
    email: str
    password: str
    roles: tuple[str, ...] = ()
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    username: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Result of a successful authentication.

    :param account: Public account view.
    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param expires_at: Access token expiry.
    """

    account: AccountOut
    access_token: str
    refresh_token: str
    expires_at: datetime
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    access_token: str
    expires_at: datetime
    token_type: str = "Bearer"


@dataclass(frozen=True, slots=True)
class ResetTokenOut:
    """
    Outstanding password-reset token. Delivering it is the caller's job.

    :param account_id: Account the token was issued for.
    :param reset_token: Encoded reset JWT.
    :param expires_at: Reset token expiry.
    """

    account_id: int
    email: str
    reset_token: str
    expires_at: datetime
