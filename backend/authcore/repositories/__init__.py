"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from authcore.repositories.account import AccountRepository
from authcore.repositories.base import BaseRepository
from authcore.repositories.revoked_token import RevokedTokenRepository
from authcore.repositories.role import RoleRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "RevokedTokenRepository",
    "RoleRepository",
]
