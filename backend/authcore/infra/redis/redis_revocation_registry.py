from __future__ import annotations

import json
import math
from datetime import timedelta
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from authcore.services._shared.errors import StoreUnavailableError
from authcore.services._shared.ports import Clock, RevocationRegistry, SystemClock, token_digest


class RedisRevocationRegistry(RevocationRegistry):
    """
    Revocation registry keyed by token digest, expiring through Redis TTLs.

    Each revocation is one atomic ``SET key value NX EX ttl``; a second
    revocation of the same token leaves the first record untouched.
    """

    def __init__(self, r: redis.Redis, *, clock: Clock | None = None, prefix: str = "revoked"):
        self.r = r
        self.prefix = prefix
        self._clock = clock or SystemClock()

    def _k(self, token: str) -> str:
        return f"{self.prefix}:{token_digest(token)}"

    def revoke(self, *, token: str, account_id: int, reason: str, ttl: timedelta) -> None:
        seconds = math.ceil(ttl.total_seconds())
        if seconds <= 0:
            # Already expired: nothing left to revoke.
            return
        value = json.dumps(
            {
                "account_id": account_id,
                "reason": reason,
                "expires_at": (self._clock.now() + timedelta(seconds=seconds)).isoformat(),
            }
        )
        try:
            self.r.set(self._k(token), value, nx=True, ex=seconds)
        except RedisError as exc:
            raise StoreUnavailableError("redis") from exc

    def is_revoked(self, token: str) -> bool:
        try:
            return cast(int, self.r.exists(self._k(token))) == 1
        except RedisError as exc:
            raise StoreUnavailableError("redis") from exc

    def purge_expired(self) -> int:
        # Redis drops expired keys itself.
        return 0
