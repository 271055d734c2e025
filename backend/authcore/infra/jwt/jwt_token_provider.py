# authcore/infra/jwt/jwt_token_provider.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from authcore.services._shared.errors import (
    TokenExpiredError,
    TokenMalformedError,
    TokenSignatureError,
)
from authcore.services._shared.ports import (
    Clock,
    IssuedToken,
    SystemClock,
    TokenClaims,
    TokenDomain,
    TokenProvider,
)

REQUIRED_CLAIMS = ["sub", "type", "jti", "iat", "exp", "tv"]

# Expiry is evaluated against the injected clock, not PyJWT's wall clock.
DECODE_OPTIONS: dict[str, Any] = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "require": REQUIRED_CLAIMS,
}


class JWTTokenProvider(TokenProvider):
    """
    PyJWT adapter signing each token domain with its own HMAC secret.

    A token carries ``sub``, ``type``, ``jti``, ``iat``, ``exp`` and ``tv``.
    Verification checks the signature, then expiry, then the ``type`` claim;
    a token issued for one domain never verifies in another.
    """

    def __init__(
        self,
        *,
        secrets: Mapping[TokenDomain, str],
        lifetimes: Mapping[TokenDomain, timedelta],
        algorithm: str = "HS256",
        clock: Clock | None = None,
    ) -> None:
        missing = [d.value for d in TokenDomain if not secrets.get(d)]
        if missing:
            raise ValueError(f"Missing signing secret for token domains: {missing}")
        self._secrets = dict(secrets)
        self._lifetimes = dict(lifetimes)
        self._algorithm = algorithm
        self._clock = clock or SystemClock()

    @classmethod
    def from_config(cls, config: Mapping[str, Any], clock: Clock | None = None) -> JWTTokenProvider:
        """Build the provider from Flask configuration keys."""
        return cls(
            secrets={
                TokenDomain.ACCESS: config["JWT_SECRET_KEY"],
                TokenDomain.REFRESH: config["JWT_REFRESH_SECRET_KEY"],
                TokenDomain.RESET: config["JWT_RESET_SECRET_KEY"],
            },
            lifetimes={
                TokenDomain.ACCESS: timedelta(seconds=int(config["ACCESS_TOKEN_EXPIRES_SECONDS"])),
                TokenDomain.REFRESH: timedelta(
                    seconds=int(config["REFRESH_TOKEN_EXPIRES_SECONDS"])
                ),
                TokenDomain.RESET: timedelta(seconds=int(config["RESET_TOKEN_EXPIRES_SECONDS"])),
            },
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            clock=clock,
        )

    def lifetime(self, domain: TokenDomain) -> timedelta:
        return self._lifetimes[domain]

    def issue(
        self,
        *,
        account_id: int,
        domain: TokenDomain,
        token_version: int,
        lifetime: timedelta | None = None,
    ) -> IssuedToken:
        now = self._clock.now()
        issued_at = int(now.timestamp())
        expires_at = int((now + (lifetime or self._lifetimes[domain])).timestamp())
        jti = uuid4().hex
        payload = {
            "sub": str(account_id),
            "type": domain.value,
            "jti": jti,
            "iat": issued_at,
            "exp": expires_at,
            "tv": int(token_version),
        }
        token = jwt.encode(payload, self._secrets[domain], algorithm=self._algorithm)
        return IssuedToken(
            token=token,
            jti=jti,
            expires_at=datetime.fromtimestamp(expires_at, tz=UTC),
        )

    def verify(self, token: str, *, domain: TokenDomain) -> TokenClaims:
        """
        Verify ``token`` in ``domain`` and return its claims.

        :raises TokenSignatureError: Signature does not match the domain secret.
        :raises TokenExpiredError: ``exp`` is not after the clock's now.
        :raises TokenMalformedError: Undecodable token, missing claims or wrong ``type``.
        """
        if not token:
            raise TokenMalformedError("Empty token")
        try:
            payload = jwt.decode(
                token,
                self._secrets[domain],
                algorithms=[self._algorithm],
                options=DECODE_OPTIONS,
            )
        except jwt.InvalidSignatureError as exc:
            raise TokenSignatureError() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformedError() from exc

        try:
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            account_id = int(payload["sub"])
            token_version = int(payload["tv"])
        except (TypeError, ValueError) as exc:
            raise TokenMalformedError() from exc

        if expires_at <= self._clock.now():
            raise TokenExpiredError()
        if payload["type"] != domain.value:
            raise TokenMalformedError("Token type mismatch")

        return TokenClaims(
            account_id=account_id,
            token_type=domain,
            jti=str(payload["jti"]),
            issued_at=issued_at,
            expires_at=expires_at,
            token_version=token_version,
        )
