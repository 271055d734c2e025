"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from authcore.api.deps import bearer_token, current_principal, json_response, require_auth, timing
from authcore.core.components import get_components
from authcore.schemas import (
    AccessTokenSchema,
    AccountSchema,
    ChangePasswordSchema,
    ForgotPasswordSchema,
    RefreshSchema,
    ResetPasswordSchema,
    ResetTokenSchema,
    SigninSchema,
    SignoutSchema,
    SignupSchema,
    TokenPairSchema,
)
from authcore.services.auth.dto import LoginIn, RegisterIn

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
signin_schema = SigninSchema()
signout_schema = SignoutSchema()
refresh_schema = RefreshSchema()
forgot_schema = ForgotPasswordSchema()
reset_schema = ResetPasswordSchema()
change_schema = ChangePasswordSchema()
account_schema = AccountSchema()
token_pair_schema = TokenPairSchema()
access_token_schema = AccessTokenSchema()
reset_token_schema = ResetTokenSchema()


PROFILE_FIELDS = ("first_name", "last_name", "phone", "date_of_birth", "address")


def _body() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/signup")
@timing
def signup():
    """Register a new account and return its public representation."""

    data = signup_schema.load(_body())
    roles = tuple(data["roles"]) if current_app.config.get("AUTH_ALLOW_ROLE_REQUESTS") else ()
    account = get_components().auth.register(
        RegisterIn(
            username=data["username"],
            email=data["email"],
            password=data["password"],
            roles=roles,
            **{field: data.get(field) for field in PROFILE_FIELDS},
        )
    )
    return json_response({"data": account_schema.dump(account)}, status=201)


@bp.post("/signin")
@timing
def signin():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = signin_schema.load(_body())
    result = get_components().auth.authenticate(
        LoginIn(username=data["username"], password=data["password"])
    )
    body = {
        "data": {
            **account_schema.dump(result.account),
            **token_pair_schema.dump(result),
        }
    }
    return json_response(body)


@bp.post("/signout")
@require_auth
@timing
def signout():
    """Revoke the presented access token and, when sent, its refresh token."""

    principal = current_principal()
    data = signout_schema.load(_body())
    get_components().auth.logout(
        principal.token,
        account_id=principal.account_id,
        refresh_token=data["refresh_token"],
    )
    return json_response({"message": "Signed out"})


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token for a new access token."""

    data = refresh_schema.load(_body())
    result = get_components().auth.refresh(data["refresh_token"])
    return json_response({"data": access_token_schema.dump(result)})


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Issue a password-reset token for the account owning ``email``."""

    data = forgot_schema.load(_body())
    result = get_components().auth.request_password_reset(data["email"])
    body: dict = {"message": "Password reset token issued"}
    if current_app.config.get("AUTH_EXPOSE_RESET_TOKEN"):
        body["data"] = reset_token_schema.dump(result)
    return json_response(body)


@bp.post("/reset-password")
@timing
def reset_password():
    """Set a new password using an outstanding reset token."""

    data = reset_schema.load(_body())
    get_components().auth.reset_password(data["reset_token"], data["new_password"])
    return json_response({"message": "Password has been reset"})


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Change the caller's password; every previously issued token stops working."""

    data = change_schema.load(_body())
    principal = current_principal()
    get_components().auth.change_password(
        principal.account_id,
        data["current_password"],
        data["new_password"],
        token=bearer_token(),
    )
    return json_response({"message": "Password changed"})
