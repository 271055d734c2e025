"""Unit tests for SQLRevocationRegistry and the in-memory double."""

from __future__ import annotations

from datetime import timedelta

import pytest

from authcore.infra.sql.sql_revocation_registry import SQLRevocationRegistry
from authcore.models import RevokedToken
from authcore.services._shared.ports import InMemoryRevocationRegistry, ManualClock, token_digest


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture(params=["sql", "memory"])
def registry(request, clock, session):
    if request.param == "sql":
        return SQLRevocationRegistry(clock=clock)
    return InMemoryRevocationRegistry(clock)


def test_revoked_until_expiry(registry, clock):
    registry.revoke(token="tok", account_id=3, reason="logout", ttl=timedelta(minutes=5))
    assert registry.is_revoked("tok") is True

    clock.advance(minutes=5)
    assert registry.is_revoked("tok") is False


def test_revoke_is_idempotent(registry):
    registry.revoke(token="tok", account_id=3, reason="logout", ttl=timedelta(minutes=5))
    registry.revoke(token="tok", account_id=3, reason="password_change", ttl=timedelta(minutes=5))
    assert registry.is_revoked("tok") is True


def test_non_positive_ttl_is_ignored(registry):
    registry.revoke(token="gone", account_id=3, reason="logout", ttl=timedelta(0))
    assert registry.is_revoked("gone") is False


def test_purge_expired_counts_removed(registry, clock):
    registry.revoke(token="a", account_id=1, reason="logout", ttl=timedelta(seconds=10))
    registry.revoke(token="b", account_id=1, reason="logout", ttl=timedelta(hours=1))

    clock.advance(seconds=10)
    assert registry.purge_expired() == 1
    assert registry.is_revoked("b") is True


def test_sql_registry_stores_only_the_digest(clock, session):
    SQLRevocationRegistry(clock=clock).revoke(
        token="raw-token", account_id=11, reason="logout", ttl=timedelta(minutes=1)
    )
    rows = session.query(RevokedToken).all()
    assert [r.token_hash for r in rows] == [token_digest("raw-token")]
    assert rows[0].account_id == 11


def test_in_memory_registry_remembers_first_reason(clock):
    registry = InMemoryRevocationRegistry(clock)
    registry.revoke(token="t", account_id=1, reason="logout", ttl=timedelta(seconds=5))
    registry.revoke(token="t", account_id=1, reason="password_change", ttl=timedelta(seconds=5))
    assert registry.reason_for("t") == "logout"
