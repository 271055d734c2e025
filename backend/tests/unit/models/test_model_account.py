"""Unit tests for the Account model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from authcore.models import Account
from tests.factories.account import AccountFactory


class TestAccountModel:
    def test_defaults_and_roles(self, session):
        account = AccountFactory(username="alice", roles=["user", "admin"])

        assert account.id is not None
        assert account.status == "active"
        assert account.is_active is True
        assert account.token_version == 1
        assert account.role_names == ["user", "admin"]
        assert account.reset_token_hash is None

    def test_email_is_normalized(self, session):
        account = AccountFactory(email="  Bob@Example.COM ")
        assert account.email == "bob@example.com"

    @pytest.mark.parametrize("bad", ["", None])
    def test_email_required(self, bad):
        with pytest.raises(ValueError):
            Account(username="carol", email=bad, password_hash="x")

    def test_username_required(self):
        with pytest.raises(ValueError):
            Account(username="   ", email="c@example.com", password_hash="x")

    def test_unknown_status_rejected(self):
        account = Account(username="dave", email="d@example.com", password_hash="x")
        with pytest.raises(ValueError, match="Unknown account status"):
            account.status = "deleted"

    def test_username_unique(self, session):
        AccountFactory(username="dup")
        with pytest.raises(IntegrityError):
            session.add(Account(username="dup", email="other@example.com", password_hash="x"))
            session.flush()
        session.rollback()

    def test_email_unique(self, session):
        AccountFactory(email="same@example.com")
        with pytest.raises(IntegrityError):
            session.add(Account(username="someone", email="same@example.com", password_hash="x"))
            session.flush()
        session.rollback()
