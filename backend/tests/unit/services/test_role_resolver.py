"""Unit tests for RoleResolver and the role-name helpers."""

from __future__ import annotations

import threading

import pytest
from sqlalchemy.exc import IntegrityError

from authcore.models import Role
from authcore.repositories import RoleRepository
from authcore.services.roles.dto import PublishedOnce, RoleRef
from authcore.services.roles.resolver import RoleResolver, authorities
from tests.factories.role import RoleFactory


def test_authorities_are_prefixed_and_uppercased():
    assert authorities(["user", "admin"]) == ["ROLE_USER", "ROLE_ADMIN"]
    assert authorities([]) == []


def test_default_role_is_created_once_and_cached(session, monkeypatch):
    resolver = RoleResolver()

    first = resolver.get_or_create_default_role()
    assert first.name == "user"
    assert session.query(Role).filter_by(name="user").count() == 1

    def _fail(self, name):
        raise AssertionError("default role lookup should be cached")

    monkeypatch.setattr(RoleRepository, "get_by_name", _fail)
    assert resolver.get_or_create_default_role() is first


def test_default_role_reuses_existing_row(session):
    existing = RoleFactory(name="user")
    assert RoleResolver().get_or_create_default_role().id == existing.id


def test_default_role_creation_race_is_success(session, monkeypatch):
    """Another writer inserts the role between our read and our insert."""
    existing = RoleFactory(name="user")
    real_get = RoleRepository.get_by_name
    calls = {"n": 0}

    def _stale_first_read(self, name):
        calls["n"] += 1
        return None if calls["n"] == 1 else real_get(self, name)

    monkeypatch.setattr(RoleRepository, "get_by_name", _stale_first_read)
    ref = RoleResolver().get_or_create_default_role()

    assert ref == RoleRef(id=existing.id, name="user")
    assert session.query(Role).filter_by(name="user").count() == 1


def test_create_conflict_with_no_winner_reraises(session, monkeypatch):
    RoleFactory(name="user")
    monkeypatch.setattr(RoleRepository, "get_by_name", lambda self, name: None)

    with pytest.raises(IntegrityError):
        RoleResolver().get_or_create_default_role()


def test_resolve_roles_filters_and_orders(session):
    admin = RoleFactory(name="admin")
    refs = RoleResolver().resolve_roles([" Moderator ", "admin", "root", "", "ADMIN"])

    assert [r.name for r in refs] == ["admin", "moderator"]
    assert refs[0].id == admin.id
    assert [r.id for r in refs] == sorted(r.id for r in refs)


def test_resolve_roles_empty(session):
    resolver = RoleResolver()
    assert resolver.resolve_roles(None) == []
    assert resolver.resolve_roles(["root"]) == []


def test_published_once_keeps_first_value():
    holder: PublishedOnce[int] = PublishedOnce()
    results: list[int] = []

    def _publish(value):
        results.append(holder.publish(value))

    threads = [threading.Thread(target=_publish, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(set(results)) == 1
    assert holder.get() == results[0]
