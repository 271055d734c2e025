from authcore.models.account import ACCOUNT_STATUSES, Account, account_roles
from authcore.models.revoked_token import REVOCATION_REASONS, RevokedToken
from authcore.models.role import DEFAULT_ROLE, ROLE_NAMES, Role

__all__ = [
    "ACCOUNT_STATUSES",
    "Account",
    "account_roles",
    "DEFAULT_ROLE",
    "REVOCATION_REASONS",
    "RevokedToken",
    "ROLE_NAMES",
    "Role",
]
