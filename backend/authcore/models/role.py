"""Role reference data."""

from __future__ import annotations

from typing import Final

from sqlalchemy import Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from authcore.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

# Closed role vocabulary; anything else is dropped by the resolver.
ROLE_NAMES: Final[tuple[str, ...]] = ("user", "admin", "moderator")
DEFAULT_ROLE: Final[str] = "user"

RoleName = Enum(*ROLE_NAMES, name="role_name", native_enum=False, length=20)


class Role(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Named role shared by many accounts.

    Rows are created lazily through an idempotent get-or-create and never
    change afterwards.

    Fields
    ------
    name : str
        One of ``user``, ``admin`` or ``moderator``. Unique.
    """

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(RoleName, nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)
