"""Account profile and administration endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from authcore.api.deps import (
    current_principal,
    json_response,
    require_auth,
    require_owner_or_admin,
    require_roles,
    timing,
)
from authcore.core.components import get_components
from authcore.schemas import (
    AccountListQuerySchema,
    AccountSchema,
    AccountStatsSchema,
    PageMetaSchema,
    ProfileUpdateSchema,
    RolesUpdateSchema,
    StatusUpdateSchema,
)

bp = Blueprint("users", __name__)

account_schema = AccountSchema()
accounts_schema = AccountSchema(many=True)
list_query_schema = AccountListQuerySchema()
page_meta_schema = PageMetaSchema()
stats_schema = AccountStatsSchema()
profile_update_schema = ProfileUpdateSchema()
roles_update_schema = RolesUpdateSchema()
status_update_schema = StatusUpdateSchema()


@bp.get("")
@require_roles("admin")
@timing
def list_accounts():
    """List accounts newest first, with search and filters (admin only)."""

    query = list_query_schema.load(request.args)
    page = get_components().accounts.list_accounts(**query)
    return json_response(
        {"data": accounts_schema.dump(page.items), "meta": page_meta_schema.dump(page.meta)}
    )


@bp.get("/stats")
@require_roles("admin")
@timing
def account_stats():
    """Return headcounts per status and role plus recent registrations (admin only)."""

    return json_response({"data": stats_schema.dump(get_components().accounts.stats())})


@bp.get("/me")
@require_auth
@timing
def get_me():
    """Return the caller's profile."""

    account = get_components().accounts.get_profile(current_principal().account_id)
    return json_response({"data": account_schema.dump(account)})


@bp.put("/me")
@require_auth
@timing
def update_me():
    """Update the caller's profile."""

    changes = profile_update_schema.load(request.get_json(silent=True) or {})
    account = get_components().accounts.update_profile(current_principal().account_id, changes)
    return json_response({"data": account_schema.dump(account)})


@bp.get("/<int:account_id>")
@require_owner_or_admin("account_id")
@timing
def get_account(account_id: int):
    """Return an account's profile to its owner or an admin."""

    account = get_components().accounts.get_profile(account_id)
    return json_response({"data": account_schema.dump(account)})


@bp.put("/<int:account_id>/roles")
@require_roles("admin")
@timing
def set_roles(account_id: int):
    """Replace an account's roles (admin only)."""

    data = roles_update_schema.load(request.get_json(silent=True) or {})
    account = get_components().accounts.set_roles(account_id, data["roles"])
    return json_response({"data": account_schema.dump(account)})


@bp.put("/<int:account_id>/status")
@require_roles("moderator", "admin")
@timing
def set_status(account_id: int):
    """Change an account's status (moderator or admin)."""

    data = status_update_schema.load(request.get_json(silent=True) or {})
    account = get_components().accounts.set_status(account_id, data["status"])
    return json_response({"data": account_schema.dump(account)})
