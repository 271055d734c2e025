"""Unit tests for the service-error to problem+json mapping."""

from __future__ import annotations

import pytest

from authcore.core.errors import problem_for_service_error
from authcore.services._shared.errors import (
    AccountNotActiveError,
    ConflictError,
    DuplicateFieldError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    StoreUnavailableError,
    TokenExpiredError,
    TokenSignatureError,
    UnauthorizedError,
    ValidationFailedError,
)


@pytest.mark.parametrize(
    ("error", "status", "code"),
    [
        (ValidationFailedError({"email": ["bad"]}), 422, "validation_error"),
        (DuplicateFieldError("email"), 409, "duplicate_field"),
        (ConflictError("Account", "x"), 409, "conflict"),
        (NotFoundError("Account", 1), 404, "not_found"),
        (InvalidCredentialsError(), 401, "invalid_credentials"),
        (AccountNotActiveError("suspended"), 403, "account_not_active"),
        (TokenExpiredError(), 401, "token_expired"),
        (TokenSignatureError(), 401, "invalid_token"),
        (UnauthorizedError(), 401, "unauthorized"),
        (ForbiddenError(), 403, "forbidden"),
        (StoreUnavailableError("database"), 503, "service_unavailable"),
    ],
)
def test_status_and_code(error, status, code):
    mapped_status, mapped_code, _ = problem_for_service_error(error)
    assert (mapped_status, mapped_code) == (status, code)


def test_details_carry_field_and_errors():
    assert problem_for_service_error(DuplicateFieldError("username"))[2] == {"field": "username"}
    assert problem_for_service_error(ValidationFailedError({"a": ["b"]}))[2] == {
        "errors": {"a": ["b"]}
    }
    assert problem_for_service_error(AccountNotActiveError("inactive"))[2] == {
        "status": "inactive"
    }
    assert problem_for_service_error(ForbiddenError())[2] is None


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "not_found"
    assert body["request_id"]
    assert resp.headers["X-Request-ID"] == body["request_id"]


def test_request_id_header_is_echoed(client):
    resp = client.get("/api/v1/nope", headers={"X-Request-ID": "req-123"})
    assert resp.get_json()["request_id"] == "req-123"
    assert resp.headers["X-Request-ID"] == "req-123"
