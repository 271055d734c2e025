"""Unit of Work contract shared by the SQLAlchemy implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from authcore.repositories import AccountRepository, RevokedTokenRepository, RoleRepository


class UnitOfWork(ABC):
    """
    One transactional boundary around the auth repositories.

    ``accounts``, ``roles`` and ``revoked_tokens`` share the session of the
    unit. Leaving the ``with`` block normally commits; an exception rolls
    back and propagates.
    """

    accounts: AccountRepository
    roles: RoleRepository
    revoked_tokens: RevokedTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
