"""Unit tests for the JSON log formatter."""

from __future__ import annotations

import json
import logging
import sys

from authcore.core.logger import JSONFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="authcore.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_structured_extras():
    payload = json.loads(
        JSONFormatter().format(_record(event="auth.login", account_id=7, request_id="r-1"))
    )
    assert payload["msg"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["event"] == "auth.login"
    assert payload["account_id"] == 7
    assert payload["request_id"] == "r-1"


def test_omits_absent_extras():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "event" not in payload
    assert payload["request_id"] is None


def test_includes_exception_text():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_masks_secret_extras():
    payload = json.loads(JSONFormatter().format(_record(password="hunter2", event="auth.x")))
    assert payload["password"] == "***"
    assert "hunter2" not in json.dumps(payload)


def test_request_id_is_adopted_and_echoed(client):
    res = client.get("/api/v1/users/me", headers={"X-Correlation-ID": "corr-42"})
    assert res.headers["X-Request-ID"] == "corr-42"


def test_request_id_is_generated_when_absent(client):
    res = client.get("/api/v1/users/me")
    assert len(res.headers["X-Request-ID"]) == 32


def test_request_ids_do_not_leak_between_requests(app, client):
    """An id adopted by one request is not reused by the next one."""
    with app.app_context():
        first = client.get("/api/v1/nope", headers={"X-Request-ID": "corr-42"})
        second = client.get("/api/v1/nope")
        third = client.get("/api/v1/nope")

    assert first.headers["X-Request-ID"] == "corr-42"
    assert second.headers["X-Request-ID"] != "corr-42"
    assert second.get_json()["request_id"] == second.headers["X-Request-ID"]
    assert third.headers["X-Request-ID"] != second.headers["X-Request-ID"]


def test_access_line_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="authcore.access"):
        client.get("/api/v1/users/me")
    (record,) = [r for r in caplog.records if r.name == "authcore.access"]
    assert record.event == "http.request"
    assert record.status == 401
    assert record.method == "GET"
