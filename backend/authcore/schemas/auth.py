"""Authentication-related Marshmallow schemas.

Input schemas only check shape (presence and type); credential rules live in
the service layer so every caller gets the same errors.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class SignupSchema(Schema):
    """Input payload for account registration."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True)
    email = fields.String(required=True)
    password = fields.String(required=True)
    roles = fields.List(fields.String(), load_default=list)
    first_name = fields.String(allow_none=True, validate=validate.Length(max=50))
    last_name = fields.String(allow_none=True, validate=validate.Length(max=50))
    phone = fields.String(allow_none=True, validate=validate.Length(max=30))
    date_of_birth = fields.Date(allow_none=True)
    address = fields.String(allow_none=True, validate=validate.Length(max=255))


class SigninSchema(Schema):
    """Input payload for authenticating an account."""

    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True)
    password = fields.String(required=True)


class SignoutSchema(Schema):
    """Optional body of a sign-out; the access token travels in the header."""

    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(allow_none=True, load_default=None)


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True)


class ForgotPasswordSchema(Schema):
    email = fields.String(required=True)


class ResetPasswordSchema(Schema):
    reset_token = fields.String(required=True)
    new_password = fields.String(required=True)


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True)
    new_password = fields.String(required=True)


class TokenPairSchema(Schema):
    """Response payload of a successful sign-in."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_at = fields.AwareDateTime(required=True)


class AccessTokenSchema(Schema):
    access_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_at = fields.AwareDateTime(required=True)


class ResetTokenSchema(Schema):
    reset_token = fields.String(required=True)
    expires_at = fields.AwareDateTime(required=True)
