"""Unit tests for the Werkzeug password hasher."""

from __future__ import annotations

import pytest

from authcore.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher


@pytest.fixture()
def hasher():
    return WerkzeugPasswordHasher(method="pbkdf2:sha256:1000")


def test_hash_is_salted_and_verifies(hasher):
    first = hasher.hash("secret123")
    second = hasher.hash("secret123")

    assert first != second
    assert "secret123" not in first
    assert first.startswith("pbkdf2:sha256:1000$")
    assert hasher.verify("secret123", first)
    assert hasher.verify("secret123", second)


def test_verify_rejects_wrong_or_empty(hasher):
    digest = hasher.hash("secret123")

    assert hasher.verify("wrong", digest) is False
    assert hasher.verify("", digest) is False
    assert hasher.verify("secret123", "") is False


def test_hash_rejects_empty_secret(hasher):
    with pytest.raises(ValueError):
        hasher.hash("")


def test_dummy_verify_returns_none(hasher):
    assert hasher.dummy_verify("anything") is None
    assert hasher.dummy_verify("") is None
