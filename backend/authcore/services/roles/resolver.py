# authcore/services/roles/resolver.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError

from authcore.models.role import DEFAULT_ROLE, ROLE_NAMES, Role
from authcore.services._shared.base import BaseService
from authcore.services.roles.dto import PublishedOnce, RoleRef
from authcore.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)

AUTHORITY_PREFIX = "ROLE_"


def authorities(names: Iterable[str]) -> list[str]:
    """Render role names as ``ROLE_<NAME>`` authority strings."""
    return [f"{AUTHORITY_PREFIX}{name.upper()}" for name in names]


class RoleResolver(BaseService):
    """
    Resolve role names to persisted roles, creating missing ones on demand.

    One instance lives per application; it owns the cached default role,
    published once and never rewritten. Creation is idempotent: when another
    writer inserts the same role first, the unique constraint fires and the
    row is re-read.
    """

    def __init__(self) -> None:
        super().__init__()
        self._default: PublishedOnce[RoleRef] = PublishedOnce()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def get_or_create_default_role(self) -> RoleRef:
        """
        Return the default ``user`` role, creating it if needed.

        :raises StoreUnavailableError: When the database is unreachable.
        """
        cached = self._default.get()
        if cached is not None:
            return cached
        with self.rw_uow() as uow:
            ref = self._ensure(uow, DEFAULT_ROLE)
        return self._default.publish(ref)

    def resolve_roles(self, names: Iterable[str] | None) -> list[RoleRef]:
        """
        Map requested names to role references.

        Names outside the ``user`` / ``admin`` / ``moderator`` vocabulary are
        dropped; known but missing roles are created. The result is ordered
        by role id and may be empty.
        """
        wanted = [n for n in dict.fromkeys(str(n).strip().lower() for n in names or ()) if n]
        known = [n for n in wanted if n in ROLE_NAMES]
        dropped = set(wanted) - set(known)
        if dropped:
            logger.info(
                "Ignoring unknown role names",
                extra={"event": "roles.dropped", "reason": sorted(dropped)},
            )
        if not known:
            return []

        with self.rw_uow() as uow:
            existing = {role.name: role for role in uow.roles.list_by_names(known)}
            refs = [
                RoleRef(id=existing[n].id, name=n) if n in existing else self._ensure(uow, n)
                for n in known
            ]
        return sorted(refs, key=lambda ref: ref.id)

    @staticmethod
    def attach(uow: SQLAlchemyUnitOfWork, refs: Iterable[RoleRef]) -> list[Role]:
        """Load the roles behind ``refs`` into ``uow``'s session."""
        return uow.roles.get_many(ref.id for ref in refs)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _ensure(uow: SQLAlchemyUnitOfWork, name: str) -> RoleRef:
        role = uow.roles.get_by_name(name)
        if role is None:
            try:
                role = uow.roles.create(name)
                logger.info("Role created", extra={"event": "roles.created", "reason": name})
            except IntegrityError:
                # Another writer created it between our read and insert.
                role = uow.roles.get_by_name(name)
                if role is None:
                    raise
        return RoleRef(id=role.id, name=role.name)
