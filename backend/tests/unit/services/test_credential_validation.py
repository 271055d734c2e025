"""Unit tests for local credential validation."""

from __future__ import annotations

import pytest

from authcore.services.auth.validation import validate_credentials


def test_valid_credentials_have_no_errors():
    assert (
        validate_credentials(
            username="john_doe", email="john@x.com", password="secret1", min_password_length=6
        )
        == {}
    )


@pytest.mark.parametrize("username", ["ab", "a" * 31, "has space", "dash-ed", "ünïcode"])
def test_bad_usernames(username):
    errors = validate_credentials(username=username, min_password_length=6, fields=("username",))
    assert "username" in errors


@pytest.mark.parametrize("username", ["abc", "a" * 30, "Under_Score_9"])
def test_good_usernames(username):
    assert validate_credentials(username=username, min_password_length=6, fields=("username",)) == {}


def test_missing_fields_are_required():
    errors = validate_credentials(min_password_length=6)
    assert set(errors) == {"username", "email", "password"}
    assert errors["email"] == ["Email is required."]


def test_password_min_length_is_configurable():
    assert validate_credentials(password="abcd", min_password_length=4, fields=("password",)) == {}
    assert "password" in validate_credentials(
        password="abcd", min_password_length=8, fields=("password",)
    )
