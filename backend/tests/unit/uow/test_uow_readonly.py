import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from authcore.models import Account
from authcore.services._shared.errors import StoreUnavailableError
from authcore.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from authcore.uow import SQLAlchemyUnitOfWork as RWuow


def _build(name: str) -> Account:
    return Account(username=name, email=f"{name}@example.com", password_hash="x")


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, session):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(_build("ro_flush"))
            uow.session.flush()

    def test_blocks_core_dml(self, app, session):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(text("DELETE FROM roles"))

    def test_allows_reads(self, app, session):
        with RWuow() as uow:
            uow.session.add(_build("reader"))

        with ROuow() as uow:
            assert uow.accounts.get_by_username("reader") is not None

    def test_disallows_commit(self, app, session):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_always_rolls_back_changes(self, app, session):
        """
        Any attempted modifications must not persist after RO UoW exits.
        """
        with RWuow() as uow:
            account = _build("immutable")
            uow.session.add(account)
            uow.session.flush()
            account_id = account.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            loaded = uow.session.get(Account, account_id)
            loaded.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with RWuow() as uow:
            assert uow.session.get(Account, account_id).email == "immutable@example.com"

    def test_transient_errors_become_store_unavailable(self, app, session):
        with pytest.raises(StoreUnavailableError), ROuow():
            raise OperationalError("SELECT 1", {}, Exception("timeout"))
