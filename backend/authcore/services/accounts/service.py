# authcore/services/accounts/service.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

from authcore.models.account import ACCOUNT_STATUSES, ACTIVE
from authcore.models.role import ROLE_NAMES
from authcore.repositories.base import Pagination
from authcore.services._shared.base import BaseService
from authcore.services._shared.errors import (
    DuplicateFieldError,
    NotFoundError,
    ValidationFailedError,
)
from authcore.services._shared.ports import Clock, SystemClock
from authcore.services.accounts.dto import AccountOut, AccountPage, AccountStats, PageMeta
from authcore.services.auth.validation import validate_credentials
from authcore.services.roles.resolver import RoleResolver

logger = logging.getLogger(__name__)

PROFILE_FIELDS = frozenset(
    {"username", "email", "first_name", "last_name", "phone", "date_of_birth", "address"}
)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50
RECENT_WINDOW = timedelta(days=30)
TREND_WINDOW = timedelta(days=7)


class AccountService(BaseService):
    """
    Profile reads and updates, plus the administrative side: role and status
    changes, the paginated account listing and headcount statistics.

    Username and email stay unique exactly as during registration: a
    pre-check reports obvious collisions and the database constraint settles
    races.
    """

    def __init__(
        self,
        *,
        role_resolver: RoleResolver,
        password_min_length: int = 6,
        clock: Clock | None = None,
    ) -> None:
        super().__init__()
        self.roles = role_resolver
        self.password_min_length = password_min_length
        self.clock = clock or SystemClock()

    def get_profile(self, account_id: int) -> AccountOut:
        """
        :raises NotFoundError: Account does not exist.
        """
        with self.ro_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            return AccountOut.from_model(account)

    def update_profile(self, account_id: int, changes: Mapping[str, Any]) -> AccountOut:
        """
        Merge ``changes`` into the account's profile.

        Only ``username``, ``email`` and the optional profile fields may
        change; credentials, roles and status have dedicated operations.

        :raises ValidationFailedError: Unknown field, or invalid username/email.
        :raises DuplicateFieldError: New username or email already taken.
        :raises NotFoundError: Account does not exist.
        """
        unknown = sorted(set(changes) - PROFILE_FIELDS)
        if unknown:
            raise ValidationFailedError({k: ["Field cannot be updated."] for k in unknown})

        identity = tuple(f for f in ("username", "email") if f in changes)
        errors = validate_credentials(
            username=changes.get("username"),
            email=changes.get("email"),
            min_password_length=self.password_min_length,
            fields=identity,
        )
        if errors:
            raise ValidationFailedError(errors)

        fields = dict(changes)
        if "email" in fields:
            fields["email"] = fields["email"].strip().lower()

        with self.rw_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            taken = uow.accounts.find_conflicts(
                username=fields.get("username"), email=fields.get("email"), exclude_id=account_id
            )
            for field_name in ("username", "email"):
                if field_name in taken:
                    raise DuplicateFieldError(field_name)
            uow.accounts.apply_profile(account, fields)
            out = AccountOut.from_model(account)

        logger.info(
            "Profile updated", extra={"event": "accounts.profile_updated", "account_id": account_id}
        )
        return out

    def set_roles(self, account_id: int, names: Iterable[str]) -> AccountOut:
        """
        Replace the account's roles.

        :raises ValidationFailedError: No known role name in ``names``.
        :raises NotFoundError: Account does not exist.
        """
        refs = self.roles.resolve_roles(names)
        if not refs:
            raise ValidationFailedError({"roles": ["At least one known role is required."]})

        with self.rw_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            account.roles = self.roles.attach(uow, refs)
            uow.accounts.flush()
            out = AccountOut.from_model(account)

        logger.info(
            "Roles updated",
            extra={"event": "accounts.roles_updated", "account_id": account_id},
        )
        return out

    def set_status(self, account_id: int, status: str) -> AccountOut:
        """
        Change the account status.

        Leaving ``active`` bumps ``token_version`` so outstanding tokens stay
        dead even after the account is reactivated.

        :raises ValidationFailedError: Unknown status.
        :raises NotFoundError: Account does not exist.
        """
        if status not in ACCOUNT_STATUSES:
            raise ValidationFailedError(
                {"status": [f"Must be one of: {', '.join(ACCOUNT_STATUSES)}."]}
            )

        with self.rw_uow() as uow:
            account = uow.accounts.get(account_id)
            if account is None:
                raise NotFoundError("Account", account_id)
            previous = account.status
            account.status = status
            if previous == ACTIVE and status != ACTIVE:
                uow.accounts.bump_token_version(account)
            else:
                uow.accounts.flush()
            out = AccountOut.from_model(account)

        logger.info(
            "Status changed",
            extra={"event": "accounts.status_changed", "account_id": account_id, "reason": status},
        )
        return out

    # ------------------------------------------------------------------ #
    # Administration views
    # ------------------------------------------------------------------ #

    def list_accounts(
        self,
        *,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str | None = None,
        status: str | None = None,
        role: str | None = None,
    ) -> AccountPage:
        """
        Page through accounts, newest first.

        ``limit`` is capped at ``MAX_PAGE_SIZE``. ``search`` matches a
        substring of username, email, first or last name, ignoring case.

        :raises ValidationFailedError: Page below 1, or unknown status or role.
        """
        errors: dict[str, list[str]] = {}
        if page < 1:
            errors["page"] = ["Must be at least 1."]
        if limit < 1:
            errors["limit"] = ["Must be at least 1."]
        if status and status not in ACCOUNT_STATUSES:
            errors["status"] = [f"Must be one of: {', '.join(ACCOUNT_STATUSES)}."]
        if role and role not in ROLE_NAMES:
            errors["role"] = [f"Must be one of: {', '.join(ROLE_NAMES)}."]
        if errors:
            raise ValidationFailedError(errors)

        pagination = Pagination(page=page, limit=min(limit, MAX_PAGE_SIZE))
        with self.ro_uow() as uow:
            result = uow.accounts.search(
                pagination, text=(search or "").strip() or None, status=status, role=role
            )
            items = tuple(AccountOut.from_model(a) for a in result.items)

        return AccountPage(
            items=items,
            meta=PageMeta(page=result.page, limit=result.limit, total=result.total),
        )

    def stats(self) -> AccountStats:
        """Count accounts per status and role, plus recent registrations."""
        now = self.clock.now()
        with self.ro_uow() as uow:
            by_status = uow.accounts.count_by_status()
            by_role = uow.accounts.count_by_role()
            recent = uow.accounts.count_created_since(now - RECENT_WINDOW)
            trend = uow.accounts.registrations_per_day(now - TREND_WINDOW)

        return AccountStats(
            total=sum(by_status.values()),
            by_status={s: by_status.get(s, 0) for s in ACCOUNT_STATUSES},
            by_role=by_role,
            recent_registrations=recent,
            registration_trend=tuple(trend),
        )
