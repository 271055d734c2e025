# authcore/services/accounts/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from authcore.models.account import Account
from authcore.models.base import as_utc
from authcore.services.roles.resolver import authorities


@dataclass(frozen=True, slots=True)
class AccountOut:
    """
    Public view of an account; never carries credentials or reset state.

    :param id: Account id.
    :param username: Login handle.
    :param email: Normalized email.
    :param roles: Role names ordered by role id.
    :param authorities: ``ROLE_<NAME>`` strings matching ``roles``.
    :param status: ``active``, ``inactive`` or ``suspended``.
    """

    id: int
    username: str
    email: str
    roles: tuple[str, ...]
    authorities: tuple[str, ...]
    status: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    address: str | None = None
    last_login_at: datetime | None = None

    @classmethod
    def from_model(cls, account: Account) -> AccountOut:
        names = tuple(account.role_names)
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            roles=names,
            authorities=tuple(authorities(names)),
            status=account.status,
            first_name=account.first_name,
            last_name=account.last_name,
            phone=account.phone,
            date_of_birth=account.date_of_birth,
            address=account.address,
            last_login_at=as_utc(account.last_login_at),
        )


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Pagination block of a listing.

    :param page: Current page (1-based).
    :param limit: Page size.
    :param total: Rows matching the filters.
    """

    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass(frozen=True, slots=True)
class AccountPage:
    items: tuple[AccountOut, ...]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class AccountStats:
    """
    Headcount of the account base.

    :param total: Every account.
    :param by_status: Accounts per status; every status is present.
    :param by_role: Holders per role name.
    :param recent_registrations: Accounts created in the last 30 days.
    :param registration_trend: ``(YYYY-MM-DD, count)`` for the last 7 days,
        oldest first; days without registrations are omitted.
    """

    total: int
    by_status: dict[str, int]
    by_role: dict[str, int]
    recent_registrations: int
    registration_trend: tuple[tuple[str, int], ...]
