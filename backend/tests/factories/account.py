"""Factory Boy definition for :class:`authcore.models.account.Account`."""

from __future__ import annotations

import factory
from werkzeug.security import generate_password_hash

from authcore.models.account import ACTIVE, Account
from tests.factories import BaseFactory
from tests.factories.role import RoleFactory

DEFAULT_PASSWORD = "Passw0rd!"
# Matches ``TestingConfig.PASSWORD_HASH_METHOD``.
TEST_HASH_METHOD = "pbkdf2:sha256:1000"


class AccountFactory(BaseFactory):
    """
    Build persisted :class:`Account` instances.

    Notes
    -----
    - ``password`` is a factory parameter; only its digest is stored.
    - ``roles`` takes role names; the default is ``["user"]``.
    """

    class Meta:
        model = Account

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password_hash = factory.LazyAttribute(
        lambda o: generate_password_hash(o.password, method=TEST_HASH_METHOD)
    )
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    status = ACTIVE
    token_version = 1

    @factory.post_generation
    def roles(obj, create, extracted, **kwargs):
        """Attach roles by name (``AccountFactory(roles=["admin"])``)."""
        names = extracted if extracted is not None else ["user"]
        if create:
            obj.roles = [RoleFactory(name=name) for name in names]
