"""Account repository: lookups, uniqueness checks and credential updates."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError

from authcore.models.role import Role
from authcore.models.account import Account, account_roles
from authcore.repositories.base import BaseRepository, Page, Pagination, paginate_select
from authcore.services._shared.errors import DuplicateFieldError, violates

# Constraint name and SQLite ``table.column`` fallback per unique field.
UNIQUE_FIELDS: dict[str, tuple[str, str]] = {
    "username": ("uq_accounts_username", "accounts.username"),
    "email": ("uq_accounts_email", "accounts.email"),
}


def duplicate_field(exc: IntegrityError) -> str | None:
    """Return the unique field an IntegrityError collided on, if any."""
    for field_name, (constraint, column) in UNIQUE_FIELDS.items():
        if violates(exc, constraint, column=column):
            return field_name
    return None


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It NEVER issues tokens or hashes passwords; services hand it ready-made
    digests and timestamps.
    """

    model = Account

    def _filterable_fields(self):
        return {
            "username": Account.username,
            "email": Account.email,
            "status": Account.status,
        }

    def _updatable_fields(self):
        """Profile and identity fields (credentials go through dedicated methods)."""
        return {
            "username",
            "email",
            "first_name",
            "last_name",
            "phone",
            "date_of_birth",
            "address",
        }

    # ---------------------------- Writes ----------------------------

    def create(self, account: Account) -> Account:
        """Insert ``account`` in a single statement.

        :param account: Fully populated transient account.
        :type account: Account
        :returns: The persisted account with its id assigned.
        :rtype: Account
        :raises DuplicateFieldError: When ``username`` or ``email`` is taken.
        """
        try:
            with self.session.begin_nested():
                self.session.add(account)
                self.session.flush()
        except IntegrityError as exc:
            field_name = duplicate_field(exc)
            if field_name is None:
                raise
            raise DuplicateFieldError(field_name) from exc
        return account

    def apply_profile(self, account: Account, fields: dict[str, Any]) -> Account:
        """Assign whitelisted profile fields and flush, translating collisions.

        :raises DuplicateFieldError: When a new ``username`` or ``email`` is taken.
        :raises ValueError: On non-updatable keys.
        """
        try:
            with self.session.begin_nested():
                self.assign_updates(account, fields, strict=True, flush=True)
        except IntegrityError as exc:
            field_name = duplicate_field(exc)
            if field_name is None:
                raise
            raise DuplicateFieldError(field_name) from exc
        return account

    def bump_token_version(self, account: Account) -> int:
        """Atomically increment ``token_version`` and return the new value.

        The increment is emitted as ``token_version = token_version + 1`` so
        concurrent bumps never collapse into one.
        """
        account.token_version = Account.token_version + 1  # type: ignore[assignment]
        self.flush()
        return int(account.token_version)

    def touch_last_login(self, account_id: int, when: datetime) -> None:
        """Record ``when`` as the account's last successful login."""
        self.session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(last_login_at=when)
            .execution_options(synchronize_session=False)
        )

    # ---------------------------- Lookups ----------------------------

    def get_by_username(self, username: str) -> Account | None:
        """Fetch an account by exact (case-sensitive) username."""
        stmt = select(Account).where(Account.username == username)
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: Account instance or ``None`` when not found.
        :rtype: Account | None
        """
        stmt = select(Account).where(Account.email == email.strip().lower())
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def find_conflicts(
        self, *, username: str | None, email: str | None, exclude_id: int | None = None
    ) -> set[str]:
        """Report which of ``username`` / ``email`` are already taken.

        Runs as a single round trip.

        :param username: Candidate username, or ``None`` to skip.
        :param email: Candidate email, or ``None`` to skip.
        :param exclude_id: Account to ignore (the one being updated).
        :returns: Subset of ``{"username", "email"}``.
        :rtype: set[str]
        """
        normalized = email.strip().lower() if email else None
        clauses = []
        if username:
            clauses.append(Account.username == username)
        if normalized:
            clauses.append(Account.email == normalized)
        if not clauses:
            return set()

        stmt = select(Account.username, Account.email).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(Account.id != exclude_id)

        taken: set[str] = set()
        for row_username, row_email in self.session.execute(stmt).all():
            if username and row_username == username:
                taken.add("username")
            if normalized and row_email == normalized:
                taken.add("email")
        return taken

    # ------------------------------ Listing -----------------------------------

    def search(
        self,
        pagination: Pagination,
        *,
        text: str | None = None,
        status: str | None = None,
        role: str | None = None,
    ) -> Page[Account]:
        """Page through accounts, newest first.

        :param pagination: Page and size.
        :param text: Case-insensitive substring of username, email, first or
            last name.
        :param status: Exact status to keep.
        :param role: Role name the account must hold.
        :returns: The requested page and the total match count.
        :rtype: Page[Account]
        """
        stmt = select(Account)
        if text:
            pattern = f"%{escape_like(text)}%"
            stmt = stmt.where(
                or_(
                    *(
                        col.ilike(pattern, escape="\\")
                        for col in (
                            Account.username,
                            Account.email,
                            Account.first_name,
                            Account.last_name,
                        )
                    )
                )
            )
        if status:
            stmt = stmt.where(Account.status == status)
        if role:
            stmt = stmt.where(Account.roles.any(Role.name == role))
        stmt = stmt.order_by(Account.created_at.desc(), Account.id.desc())

        items, total = paginate_select(self.session, stmt, pagination)
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    # ------------------------------ Statistics --------------------------------

    def count_by_status(self) -> dict[str, int]:
        stmt = select(Account.status, func.count()).group_by(Account.status)
        return {status: int(n) for status, n in self.session.execute(stmt).all()}

    def count_by_role(self) -> dict[str, int]:
        """Holders per role name; roles nobody holds report ``0``."""
        stmt = (
            select(Role.name, func.count(account_roles.c.account_id))
            .outerjoin(account_roles, account_roles.c.role_id == Role.id)
            .group_by(Role.id, Role.name)
            .order_by(Role.id)
        )
        return {name: int(n) for name, n in self.session.execute(stmt).all()}

    def count_created_since(self, since: datetime) -> int:
        stmt = select(func.count()).select_from(Account).where(Account.created_at >= since)
        return int(self.session.execute(stmt).scalar_one())

    def registrations_per_day(self, since: datetime) -> list[tuple[str, int]]:
        """``(YYYY-MM-DD, count)`` pairs for accounts created since ``since``, oldest day first."""
        day = func.date(Account.created_at)
        stmt = (
            select(day, func.count())
            .where(Account.created_at >= since)
            .group_by(day)
            .order_by(day)
        )
        return [(str(d), int(n)) for d, n in self.session.execute(stmt).all()]


def escape_like(value: str) -> str:
    """Escape ``LIKE`` wildcards so ``value`` matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
