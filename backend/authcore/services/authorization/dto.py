from __future__ import annotations

from dataclasses import dataclass

from authcore.services._shared.ports import TokenClaims


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller, as established by the guard.

    :param account_id: Account id from the verified token.
    :param username: Current username.
    :param roles: Role names ordered by role id.
    :param authorities: ``ROLE_<NAME>`` strings.
    :param claims: Verified token claims.
    :param token: The raw access token, for downstream revocation.
    """

    account_id: int
    username: str
    roles: tuple[str, ...]
    authorities: tuple[str, ...]
    claims: TokenClaims
    token: str

    def has_role(self, name: str) -> bool:
        return name.lower() in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_role("admin")
