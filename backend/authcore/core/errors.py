"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from authcore.core.logger import ensure_request_id
from authcore.services._shared.errors import (
    AccountNotActiveError,
    ConflictError,
    DuplicateFieldError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    StoreUnavailableError,
    TokenExpiredError,
    UnauthorizedError,
    ValidationFailedError,
)

log = logging.getLogger(__name__)

# Most specific first; the first ``isinstance`` match wins.
SERVICE_ERROR_MAP: tuple[tuple[type[ServiceError], int, str], ...] = (
    (ValidationFailedError, HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error"),
    (DuplicateFieldError, HTTPStatus.CONFLICT, "duplicate_field"),
    (ConflictError, HTTPStatus.CONFLICT, "conflict"),
    (NotFoundError, HTTPStatus.NOT_FOUND, "not_found"),
    (InvalidCredentialsError, HTTPStatus.UNAUTHORIZED, "invalid_credentials"),
    (AccountNotActiveError, HTTPStatus.FORBIDDEN, "account_not_active"),
    (TokenExpiredError, HTTPStatus.UNAUTHORIZED, "token_expired"),
    (InvalidTokenError, HTTPStatus.UNAUTHORIZED, "invalid_token"),
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED, "unauthorized"),
    (ForbiddenError, HTTPStatus.FORBIDDEN, "forbidden"),
    (StoreUnavailableError, HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable"),
)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised by the HTTP layer itself.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


def problem_for_service_error(err: ServiceError) -> tuple[int, str, dict[str, Any] | None]:
    """Return ``(status, code, details)`` for a service-layer error."""
    status, code = int(HTTPStatus.BAD_REQUEST), "bad_request"
    for exc_type, mapped_status, mapped_code in SERVICE_ERROR_MAP:
        if isinstance(err, exc_type):
            status, code = int(mapped_status), mapped_code
            break

    details: dict[str, Any] | None = None
    if isinstance(err, ValidationFailedError):
        details = {"errors": err.errors}
    elif isinstance(err, DuplicateFieldError):
        details = {"field": err.field}
    elif isinstance(err, AccountNotActiveError):
        details = {"status": err.status}
    return status, code, details


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        status, code, details = problem_for_service_error(err)
        problem = _as_problem(status=status, code=code, message=str(err), details=details)
        if status >= 500:
            log.error(
                "ServiceError: code=%s status=%s request_id=%s",
                code,
                status,
                problem["request_id"],
                exc_info=err,
            )
        else:
            log.warning(
                "ServiceError: code=%s status=%s msg=%s request_id=%s",
                code,
                status,
                str(err),
                problem["request_id"],
            )
        resp = _problem_response(problem)
        if isinstance(err, StoreUnavailableError):
            resp.headers["Retry-After"] = str(err.retry_after)
        if status == HTTPStatus.UNAUTHORIZED:
            resp.headers["WWW-Authenticate"] = "Bearer"
        return resp, status

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            problem.get("request_id"),
        )
        return _problem_response(problem), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug may provide HTML-ish description; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            error_code,
            status,
            message,
            problem.get("request_id"),
        )
        return _problem_response(problem), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.normalized_messages()},
        )
        log.warning("ValidationError: request_id=%s", problem.get("request_id"))
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        problem = _as_problem(
            status=HTTPStatus.CONFLICT,
            code="conflict",
            message="Resource conflict",
        )
        log.error("IntegrityError: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem), HTTPStatus.CONFLICT

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error(
            "Unhandled exception: request_id=%s",
            problem.get("request_id"),
            exc_info=True,
        )
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
