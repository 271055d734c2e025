"""Unit tests for Role and RevokedToken models."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from authcore.models import RevokedToken, Role
from authcore.models.base import as_utc
from tests.factories.role import RoleFactory


def test_role_name_unique(session):
    RoleFactory(name="admin")
    with pytest.raises(IntegrityError):
        session.add(Role(name="admin"))
        session.flush()
    session.rollback()


def test_role_factory_reuses_existing_row(session):
    first = RoleFactory(name="moderator")
    second = RoleFactory(name="moderator")
    assert first.id == second.id


def test_revoked_token_hash_unique(session):
    expires = datetime.now(UTC) + timedelta(minutes=5)
    session.add(RevokedToken(token_hash="a" * 64, account_id=1, reason="logout", expires_at=expires))
    session.flush()
    with pytest.raises(IntegrityError):
        session.add(
            RevokedToken(token_hash="a" * 64, account_id=2, reason="logout", expires_at=expires)
        )
        session.flush()
    session.rollback()


def test_as_utc_handles_naive_and_aware():
    naive = datetime(2024, 1, 1, 12, 0)
    aware = datetime(2024, 1, 1, 13, 0, tzinfo=UTC)

    assert as_utc(None) is None
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    assert as_utc(aware) == aware
