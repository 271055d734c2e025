"""Account model: credentials, roles, profile and reset-token state."""

from __future__ import annotations

from datetime import date, datetime
from typing import Final

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin
from .role import Role

ACCOUNT_STATUSES: Final[tuple[str, ...]] = ("active", "inactive", "suspended")
ACTIVE: Final[str] = "active"

AccountStatus = Enum(*ACCOUNT_STATUSES, name="account_status", native_enum=False, length=20)

account_roles = Table(
    "account_roles",
    db.metadata,
    Column(
        "account_id",
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        Integer,
        ForeignKey("roles.id", ondelete="RESTRICT"),
        primary_key=True,
    ),
)


class Account(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered identity with its hashed credential and role set.

    Fields
    ------
    username : str
        Case-sensitive login handle. Unique.
    email : str
        Contact email, stored trimmed and lowercased. Unique.
    password_hash : str
        Salted digest produced by the password hasher; never the raw secret.
    roles : list[Role]
        Role references ordered by role id.
    status : str
        ``active``, ``inactive`` or ``suspended``. Only active accounts log in.
    token_version : int
        Embedded into every token as ``tv``; bumping it invalidates all
        previously issued tokens.
    reset_token_hash : str | None
        SHA-256 hex digest of the outstanding password-reset token.
    reset_token_expires_at : datetime | None
        Expiry of the outstanding reset token.
    last_login_at : datetime | None
        Time of the last successful authentication.
    """

    __tablename__ = "accounts"

    # Credentials
    username: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        AccountStatus, nullable=False, default=ACTIVE, server_default=ACTIVE
    )
    token_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default="1"
    )
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Reset flow
    reset_token_hash: Mapped[str | None] = mapped_column(String(64))
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Profile
    first_name: Mapped[str | None] = mapped_column(String(50))
    last_name: Mapped[str | None] = mapped_column(String(50))
    phone: Mapped[str | None] = mapped_column(String(30))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    address: Mapped[str | None] = mapped_column(String(255))

    roles: Mapped[list[Role]] = relationship(
        Role,
        secondary=account_roles,
        order_by=Role.id,
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_accounts_username"),
        UniqueConstraint("email", name="uq_accounts_email"),
    )

    @property
    def role_names(self) -> list[str]:
        """Role names in role-id order."""
        return [role.name for role in self.roles]

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize email to its stored form.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Lowercased, trimmed email.
        :rtype: str
        :raises ValueError: If email is missing.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        return value.strip().lower()

    @validates("username")
    def _check_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()

    @validates("status")
    def _check_status(self, key: str, value: str) -> str:
        if value not in ACCOUNT_STATUSES:
            raise ValueError(f"Unknown account status: {value!r}")
        return value
