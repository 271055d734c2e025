"""
Unit tests for RedisRevocationRegistry using fakeredis.

They use fakeredis.FakeRedis so they run entirely in-memory.
"""

from __future__ import annotations

import json
from datetime import timedelta

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from authcore.infra.redis.redis_revocation_registry import RedisRevocationRegistry
from authcore.services._shared.errors import StoreUnavailableError
from authcore.services._shared.ports import ManualClock, token_digest


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def registry(fake_redis):
    return RedisRevocationRegistry(fake_redis, clock=ManualClock())


def test_revoke_stores_digest_keyed_record(registry, fake_redis):
    registry.revoke(token="tok-1", account_id=9, reason="logout", ttl=timedelta(seconds=90))

    key = f"revoked:{token_digest('tok-1')}"
    record = json.loads(fake_redis.get(key))
    assert record["account_id"] == 9
    assert record["reason"] == "logout"
    assert 0 < fake_redis.ttl(key) <= 90
    assert fake_redis.get("revoked:tok-1") is None
    assert registry.is_revoked("tok-1") is True
    assert registry.is_revoked("tok-2") is False


def test_revoke_is_idempotent_and_keeps_first_reason(registry, fake_redis):
    registry.revoke(token="tok", account_id=1, reason="logout", ttl=timedelta(seconds=60))
    registry.revoke(token="tok", account_id=1, reason="password_change", ttl=timedelta(hours=1))

    record = json.loads(fake_redis.get(f"revoked:{token_digest('tok')}"))
    assert record["reason"] == "logout"
    assert fake_redis.ttl(f"revoked:{token_digest('tok')}") <= 60


def test_fractional_ttl_rounds_up(registry, fake_redis):
    registry.revoke(token="short", account_id=1, reason="logout", ttl=timedelta(milliseconds=300))
    assert fake_redis.ttl(f"revoked:{token_digest('short')}") == 1


def test_expired_token_is_not_recorded(registry, fake_redis):
    registry.revoke(token="old", account_id=1, reason="logout", ttl=timedelta(0))
    assert registry.is_revoked("old") is False
    assert fake_redis.dbsize() == 0


def test_purge_is_noop(registry):
    assert registry.purge_expired() == 0


def test_redis_errors_become_store_unavailable(registry, monkeypatch):
    def _boom(*args, **kwargs):
        raise RedisConnectionError("down")

    monkeypatch.setattr(registry.r, "set", _boom)
    monkeypatch.setattr(registry.r, "exists", _boom)

    with pytest.raises(StoreUnavailableError) as exc_info:
        registry.revoke(token="t", account_id=1, reason="logout", ttl=timedelta(seconds=5))
    assert exc_info.value.store == "redis"

    with pytest.raises(StoreUnavailableError):
        registry.is_revoked("t")
