# authcore/services/authorization/guard.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from authcore.models.account import ACTIVE
from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import (
    ForbiddenError,
    InvalidTokenError,
    UnauthorizedError,
)
from authcore.services._shared.policies.common import is_owner
from authcore.services._shared.ports import RevocationRegistry, TokenDomain, TokenProvider
from authcore.services.authorization.dto import Principal
from authcore.services.roles.resolver import authorities

logger = logging.getLogger(__name__)


class AuthorizationGuard(BaseService):
    """
    Decide whether a bearer token may perform a protected operation.

    Checks run in a fixed order and stop at the first failure:

    1. token present and verifies in the access domain
    2. token not revoked
    3. account exists and ``tv`` matches its ``token_version``
    4. account is active
    5. role gate (any-of, or all-of with ``require_all``)
    6. ownership gate (owner, or an admin)

    Failures 1-3 raise :class:`UnauthorizedError`; 4-6 raise :class:`ForbiddenError`.
    Registry outages propagate as ``StoreUnavailableError``.
    """

    def __init__(
        self, *, token_provider: TokenProvider, revocation_registry: RevocationRegistry
    ) -> None:
        super().__init__()
        self.tokens = token_provider
        self.registry = revocation_registry

    def authorize(
        self,
        token: str | None,
        *,
        roles: Iterable[str] | None = None,
        require_all: bool = False,
        owner_id: int | str | None = None,
    ) -> Principal:
        """
        Authorize ``token`` and return the principal it represents.

        :param token: Raw access token, or ``None`` when the request carried none.
        :param roles: Role names of which the caller needs one (or all).
        :param require_all: Require every role in ``roles`` instead of any.
        :param owner_id: Owner of the target resource; admins bypass this gate.
        :raises UnauthorizedError: Missing, invalid, revoked or stale token.
        :raises ForbiddenError: Inactive account, missing role or not the owner.
        """
        if not token:
            raise UnauthorizedError("No token provided")

        try:
            claims = self.tokens.verify(token, domain=TokenDomain.ACCESS)
        except InvalidTokenError as exc:
            raise UnauthorizedError(str(exc)) from exc

        if self.registry.is_revoked(token):
            raise UnauthorizedError("Token revoked")

        with self.ro_uow() as uow:
            account = uow.accounts.get(claims.account_id)
            if account is None:
                raise UnauthorizedError("Unknown account")
            if account.token_version != claims.token_version:
                raise UnauthorizedError("Token no longer valid")
            if account.status != ACTIVE:
                raise ForbiddenError(f"Account is {account.status}")
            names = tuple(account.role_names)
            username = account.username

        principal = Principal(
            account_id=claims.account_id,
            username=username,
            roles=names,
            authorities=tuple(authorities(names)),
            claims=claims,
            token=token,
        )

        required = {r.lower() for r in roles or ()}
        if required:
            held = set(names)
            allowed = required <= held if require_all else bool(required & held)
            if not allowed:
                logger.info(
                    "Role gate denied",
                    extra={"event": "guard.role_denied", "account_id": principal.account_id},
                )
                raise ForbiddenError(f"Requires role: {', '.join(sorted(required))}")

        if owner_id is not None and not principal.is_admin:
            if not is_owner(actor_id=principal.account_id, owner_id=owner_id):
                logger.info(
                    "Ownership gate denied",
                    extra={"event": "guard.owner_denied", "account_id": principal.account_id},
                )
                raise ForbiddenError("Not the owner of this resource")

        return principal
