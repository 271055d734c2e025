from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from authcore.services._shared.ports.clock import Clock, SystemClock


def token_digest(token: str) -> str:
    """Return the SHA-256 hex digest used as the registry key for ``token``."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class RevocationRegistry(Protocol):
    """
    Abstraction for a store of revoked bearer tokens.

    Entries are keyed by :func:`token_digest` and expire with the token they
    describe. ``revoke`` is idempotent.
    """

    def revoke(self, *, token: str, account_id: int, reason: str, ttl: timedelta) -> None: ...
    def is_revoked(self, token: str) -> bool: ...
    def purge_expired(self) -> int: ...


@dataclass(frozen=True, slots=True)
class _Entry:
    account_id: int
    reason: str
    expires_at: datetime


class InMemoryRevocationRegistry(RevocationRegistry):
    """Dictionary-backed registry for unit tests, with lazy expiry."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._entries: dict[str, _Entry] = {}

    def revoke(self, *, token: str, account_id: int, reason: str, ttl: timedelta) -> None:
        if ttl <= timedelta(0):
            return
        self._entries.setdefault(
            token_digest(token),
            _Entry(account_id=account_id, reason=reason, expires_at=self._clock.now() + ttl),
        )

    def is_revoked(self, token: str) -> bool:
        entry = self._entries.get(token_digest(token))
        return entry is not None and entry.expires_at > self._clock.now()

    def purge_expired(self) -> int:
        now = self._clock.now()
        stale = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def reason_for(self, token: str) -> str | None:
        entry = self._entries.get(token_digest(token))
        return entry.reason if entry else None
