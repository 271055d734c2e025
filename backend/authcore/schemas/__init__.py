"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccessTokenSchema,
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
from .user import (
    AccountListQuerySchema,
    AccountSchema,
    AccountStatsSchema,
    PageMetaSchema,
    ProfileUpdateSchema,
    RolesUpdateSchema,
    StatusUpdateSchema,
)

__all__ = [
    "AccessTokenSchema",
    "AccountListQuerySchema",
    "AccountSchema",
    "AccountStatsSchema",
    "ChangePasswordSchema",
    "ForgotPasswordSchema",
    "PageMetaSchema",
    "ProfileUpdateSchema",
    "RefreshSchema",
    "ResetPasswordSchema",
    "ResetTokenSchema",
    "RolesUpdateSchema",
    "SigninSchema",
    "SignoutSchema",
    "SignupSchema",
    "StatusUpdateSchema",
    "TokenPairSchema",
]
