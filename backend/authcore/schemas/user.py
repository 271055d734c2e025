"""Account resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, RAISE, Schema, fields, post_load, validate

from authcore.models.account import ACCOUNT_STATUSES
from authcore.models.role import ROLE_NAMES


class AccountSchema(Schema):
    """Public representation of an account."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)
    authorities = fields.List(fields.String(), required=True)
    status = fields.String(required=True)
    first_name = fields.String(allow_none=True)
    last_name = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    date_of_birth = fields.Date(allow_none=True)
    address = fields.String(allow_none=True)
    last_login_at = fields.AwareDateTime(allow_none=True)


class ProfileUpdateSchema(Schema):
    """Partial profile update; unknown keys are rejected."""

    class Meta:
        unknown = RAISE

    username = fields.String()
    email = fields.String()
    first_name = fields.String(allow_none=True, validate=validate.Length(max=50))
    last_name = fields.String(allow_none=True, validate=validate.Length(max=50))
    phone = fields.String(allow_none=True, validate=validate.Length(max=30))
    date_of_birth = fields.Date(allow_none=True)
    address = fields.String(allow_none=True, validate=validate.Length(max=255))


class RolesUpdateSchema(Schema):
    roles = fields.List(fields.String(), required=True, validate=validate.Length(min=1))


class StatusUpdateSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(ACCOUNT_STATUSES))


class AccountListQuerySchema(Schema):
    """Query string of the account listing; ``limit`` is clamped to ``max_limit``."""

    class Meta:
        unknown = EXCLUDE

    def __init__(self, *, default_limit: int = 10, max_limit: int = 50, **kwargs: Any) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))
    search = fields.String(load_default=None)
    status = fields.String(load_default=None, validate=validate.OneOf(ACCOUNT_STATUSES))
    role = fields.String(load_default=None, validate=validate.OneOf(ROLE_NAMES))

    @post_load
    def apply_limit(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["limit"] = min(data.get("limit", self._default_limit), self._max_limit)
        return data


class PageMetaSchema(Schema):
    """Metadata block of paginated responses."""

    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total = fields.Integer(required=True)
    pages = fields.Integer(required=True)
    has_next = fields.Boolean(required=True)
    has_prev = fields.Boolean(required=True)


class AccountStatsSchema(Schema):
    total = fields.Integer(required=True)
    by_status = fields.Dict(keys=fields.String(), values=fields.Integer())
    by_role = fields.Dict(keys=fields.String(), values=fields.Integer())
    recent_registrations = fields.Integer(required=True)
    registration_trend = fields.Method("dump_trend")

    def dump_trend(self, obj: Any) -> list[dict[str, Any]]:
        return [{"date": day, "count": count} for day, count in obj.registration_trend]
