"""Revocation records for bearer tokens."""

from __future__ import annotations

from datetime import datetime
from typing import Final

from sqlalchemy import DateTime, Enum, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

REVOCATION_REASONS: Final[tuple[str, ...]] = (
    "logout",
    "password_change",
    "account_deactivated",
    "security_breach",
)

RevocationReason = Enum(
    *REVOCATION_REASONS, name="revocation_reason", native_enum=False, length=30
)


class RevokedToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A token that must no longer authorize anything.

    Only the SHA-256 hex digest of the token is stored. Rows whose
    ``expires_at`` has passed are treated as absent and removed by the purge
    command.

    Fields
    ------
    token_hash : str
        Hex digest of the raw token. Unique.
    account_id : int
        Account the token was issued to.
    reason : str
        Why the token was revoked.
    expires_at : datetime
        The token's own expiry.
    """

    __tablename__ = "revoked_tokens"

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    account_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(RevocationReason, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("token_hash", name="uq_revoked_tokens_token_hash"),
        Index("ix_revoked_tokens_expires_at", "expires_at"),
        Index("ix_revoked_tokens_account_id", "account_id"),
    )
