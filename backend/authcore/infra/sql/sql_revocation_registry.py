from __future__ import annotations

from datetime import timedelta

from authcore.services._shared.ports import Clock, RevocationRegistry, SystemClock, token_digest
from authcore.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork


class SQLRevocationRegistry(RevocationRegistry):
    """
    Revocation registry stored in the ``revoked_tokens`` table.

    Each call runs in its own unit of work, so callers must not invoke it
    while holding an open read-write unit of work on the same session.
    Expired rows are ignored on read and deleted by :meth:`purge_expired`.
    """

    def __init__(self, *, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()

    def revoke(self, *, token: str, account_id: int, reason: str, ttl: timedelta) -> None:
        if ttl <= timedelta(0):
            return
        with SQLAlchemyUnitOfWork() as uow:
            uow.revoked_tokens.insert_if_absent(
                token_hash=token_digest(token),
                account_id=account_id,
                reason=reason,
                expires_at=self._clock.now() + ttl,
            )

    def is_revoked(self, token: str) -> bool:
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            return uow.revoked_tokens.is_active(token_digest(token), self._clock.now())

    def purge_expired(self) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.revoked_tokens.purge_expired(self._clock.now())
