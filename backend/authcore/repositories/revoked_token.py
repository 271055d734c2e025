"""Revocation records repository backing the SQL revocation registry."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from authcore.models.revoked_token import RevokedToken
from authcore.repositories.base import BaseRepository
from authcore.services._shared.errors import violates


class RevokedTokenRepository(BaseRepository[RevokedToken]):
    """Persistence-only repository for :class:`RevokedToken`."""

    model = RevokedToken

    def insert_if_absent(
        self,
        *,
        token_hash: str,
        account_id: int,
        reason: str,
        expires_at: datetime,
    ) -> bool:
        """Insert one record; a duplicate digest counts as success.

        :returns: ``True`` when a row was written, ``False`` when it already existed.
        :rtype: bool
        """
        record = RevokedToken(
            token_hash=token_hash,
            account_id=account_id,
            reason=reason,
            expires_at=expires_at,
        )
        try:
            with self.session.begin_nested():
                self.session.add(record)
                self.session.flush()
        except IntegrityError as exc:
            if violates(exc, "uq_revoked_tokens_token_hash", column="revoked_tokens.token_hash"):
                return False
            raise
        return True

    def is_active(self, token_hash: str, now: datetime) -> bool:
        """Return ``True`` when an unexpired record exists for ``token_hash``."""
        stmt = (
            select(RevokedToken.id)
            .where(RevokedToken.token_hash == token_hash)
            .where(RevokedToken.expires_at > now)
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None

    def purge_expired(self, now: datetime) -> int:
        """Delete every record whose ``expires_at`` is not after ``now``."""
        result = self.session.execute(
            delete(RevokedToken)
            .where(RevokedToken.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
