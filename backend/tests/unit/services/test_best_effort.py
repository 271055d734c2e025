"""Unit tests for the best-effort side-effect helper."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy.exc import OperationalError

from authcore.services._shared.best_effort import best_effort
from authcore.services._shared.errors import StoreUnavailableError


def test_returns_action_result():
    assert best_effort(lambda: 42, event="test.ok") == 42


@pytest.mark.parametrize(
    "error",
    [StoreUnavailableError("redis"), OperationalError("SELECT 1", {}, Exception("gone"))],
)
def test_store_failures_are_logged_and_dropped(caplog, error):
    def _fail():
        raise error

    with caplog.at_level(logging.WARNING, logger="authcore.services._shared.best_effort"):
        assert best_effort(_fail, event="test.failed", account_id=5) is None

    record = caplog.records[-1]
    assert record.event == "test.failed"
    assert record.account_id == 5


def test_other_errors_propagate():
    def _bug():
        raise KeyError("programming error")

    with pytest.raises(KeyError):
        best_effort(_bug, event="test.bug")
