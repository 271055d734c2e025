"""Role repository."""

from __future__ import annotations

from collections.abc import Iterable
from typing import cast

from sqlalchemy import select

from authcore.models.role import Role
from authcore.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """Persistence-only repository for :class:`Role`."""

    model = Role

    def _filterable_fields(self):
        return {"name": Role.name}

    def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        return cast(Role | None, self.session.execute(stmt).scalars().first())

    def list_by_names(self, names: Iterable[str]) -> list[Role]:
        """Return the roles whose name is in ``names``, ordered by id."""
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        stmt = select(Role).where(Role.name.in_(wanted)).order_by(Role.id)
        return list(self.session.execute(stmt).scalars().all())

    def create(self, name: str) -> Role:
        """Insert a role inside a SAVEPOINT.

        A concurrent writer creating the same name surfaces as
        :class:`sqlalchemy.exc.IntegrityError`; the outer transaction stays usable.
        """
        role = Role(name=name)
        with self.session.begin_nested():
            self.session.add(role)
            self.session.flush()
        return role

    def get_many(self, ids: Iterable[int]) -> list[Role]:
        """Return the roles with the given ids, ordered by id."""
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []
        stmt = select(Role).where(Role.id.in_(wanted)).order_by(Role.id)
        return list(self.session.execute(stmt).scalars().all())
