from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol


class TokenDomain(str, enum.Enum):
    """Signing domain of a bearer token; each one has its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    Freshly signed token.

    :param token: Compact JWT.
    :param jti: Unique token id.
    :param expires_at: Absolute expiry (UTC).
    """

    token: str
    jti: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified claims of a token.

    :param account_id: Subject account id.
    :param token_type: Domain the token was issued for.
    :param jti: Unique token id.
    :param issued_at: ``iat`` (UTC).
    :param expires_at: ``exp`` (UTC).
    :param token_version: ``tv`` claim, compared against the account's counter.
    """

    account_id: int
    token_type: TokenDomain
    jti: str
    issued_at: datetime
    expires_at: datetime
    token_version: int

    def remaining(self, now: datetime) -> timedelta:
        """Lifetime left at ``now``; never negative."""
        return max(self.expires_at - now, timedelta(0))


class TokenProvider(Protocol):
    """Port for issuing and verifying signed bearer tokens."""

    def issue(
        self,
        *,
        account_id: int,
        domain: TokenDomain,
        token_version: int,
        lifetime: timedelta | None = None,
    ) -> IssuedToken: ...

    def verify(self, token: str, *, domain: TokenDomain) -> TokenClaims: ...

    def lifetime(self, domain: TokenDomain) -> timedelta: ...
