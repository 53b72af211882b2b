"""Unit tests for the transactional session scope."""

from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlmodel import create_engine, select

from src.shop.core.errors import ConnectionFailed, QueryFailed
from src.shop.core.services import DbSessionService
from src.shop.entities.service.product import ProductTable


class TestSessionScope:
    """Tests for DbSessionService.session_scope."""

    def test_commits_on_success(self, database_service):
        with database_service.session_scope() as session:
            session.add(ProductTable(name="Shoes", price=Decimal("49.99")))

        with database_service.session_scope() as session:
            names = session.exec(select(ProductTable.name)).all()

        assert names == ["Shoes"]

    def test_rolls_back_and_reraises_other_errors(self, database_service):
        with pytest.raises(RuntimeError):
            with database_service.session_scope() as session:
                session.add(ProductTable(name="Shoes", price=Decimal("49.99")))
                session.flush()
                raise RuntimeError("boom")

        with database_service.session_scope() as session:
            assert session.exec(select(ProductTable)).all() == []

    def test_statement_failure_becomes_query_failed(self, database_service):
        with pytest.raises(QueryFailed):
            with database_service.session_scope() as session:
                session.connection().execute(text("SELECT * FROM no_such_table"))

    def test_failed_rollback_keeps_query_failed(self, database_service, monkeypatch):
        """A rollback that fails on a broken connection is logged, not raised."""
        make_session = database_service.get_session

        def session_with_broken_rollback():
            session = make_session()

            def rollback():
                raise OperationalError("ROLLBACK", {}, Exception("connection reset"))

            session.rollback = rollback
            return session

        monkeypatch.setattr(database_service, "get_session", session_with_broken_rollback)

        with pytest.raises(QueryFailed):
            with database_service.session_scope() as session:
                session.connection().execute(text("SELECT * FROM no_such_table"))
        with pytest.raises(RuntimeError, match="boom"):
            with database_service.session_scope():
                raise RuntimeError("boom")

    def test_foreign_keys_enforced(self, database_service):
        with pytest.raises(QueryFailed):
            with database_service.session_scope() as session:
                session.connection().execute(
                    text("INSERT INTO assets (product_id, filename) VALUES (999, 'a.png')")
                )

    def test_unreachable_database_becomes_connection_failed(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'shop.db'}")
        service = DbSessionService(engine)

        with pytest.raises(ConnectionFailed):
            with service.session_scope():
                pass

        engine.dispose()


class TestHealth:
    def test_health_check(self, database_service):
        assert database_service.health_check() is True

    def test_health_check_failure(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'shop.db'}")

        assert DbSessionService(engine).health_check() is False

    def test_pool_status_keys(self, database_service):
        assert set(database_service.get_pool_status()) == {
            "size",
            "checked_in",
            "checked_out",
            "overflow",
        }
