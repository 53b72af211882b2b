"""Unit tests for the SQL product store."""

from decimal import Decimal

import pytest
from sqlmodel import select

from src.shop.core.errors import QueryFailed
from src.shop.entities.service.asset import AssetTable
from src.shop.entities.service.product import Product, ProductCreate, ProductTable
from tests.fixtures.dummies import BrokenAssetQueryStore, BrokenProductDeleteStore


def _create(store, name="Shoes", price="49.99") -> Product:
    return store.insert(ProductCreate(name=name, price=Decimal(price)))


class TestInsertAndRead:
    """Tests for inserting and reading products."""

    def test_insert_round_trip(self, product_store):
        """An inserted product reads back identically with no assets."""
        created = _create(product_store)

        assert created.id is not None
        assert created.name == "Shoes"
        assert created.price == Decimal("49.99")
        assert created.assets == []
        assert product_store.get_by_id(created.id) == created

    def test_get_missing_returns_none(self, product_store):
        assert product_store.get_by_id(12345) is None

    def test_get_all_empty(self, product_store):
        assert product_store.get_all() == []

    def test_get_all_with_assets(self, product_store):
        shoes = _create(product_store)
        hat = _create(product_store, "Hat", "12.50")
        first = product_store.add_asset(shoes.id, "a.jpeg")
        second = product_store.add_asset(shoes.id, "b.png")

        products = product_store.get_all()

        assert [p.id for p in products] == [shoes.id, hat.id]
        assert products[0].assets == [first, second]
        assert products[1].assets == []

    def test_assets_belong_to_their_product(self, product_store):
        shoes = _create(product_store)
        hat = _create(product_store, "Hat", "12.50")
        product_store.add_asset(hat.id, "hat.png")

        assert product_store.get_by_id(shoes.id).assets == []
        assert [a.filename for a in product_store.get_by_id(hat.id).assets] == ["hat.png"]

    def test_read_failure_returns_nothing_partial(self, database_service):
        """A failing asset query fails the whole read."""
        store = BrokenAssetQueryStore(database_service)
        _create(store)

        with pytest.raises(QueryFailed):
            store.get_all()
        with pytest.raises(QueryFailed):
            store.get_by_id(1)


class TestUpdate:
    def test_update_replaces_fields(self, product_store):
        created = _create(product_store)
        asset = product_store.add_asset(created.id, "a.jpeg")

        updated = product_store.update(
            created.id, ProductCreate(name="Boots", price=Decimal("89.00"))
        )

        assert updated == Product(
            id=created.id, name="Boots", price=Decimal("89.00"), assets=[asset]
        )
        assert product_store.get_by_id(created.id) == updated

    def test_update_missing_returns_none(self, product_store):
        assert product_store.update(7, ProductCreate(name="X", price=Decimal("1"))) is None


class TestDelete:
    """Tests for cascading product deletion."""

    def test_delete_removes_product_and_assets(self, product_store, session):
        created = _create(product_store)
        product_store.add_asset(created.id, "a.jpeg")
        product_store.add_asset(created.id, "b.png")

        filenames = product_store.delete_by_id(created.id)

        assert filenames == ["a.jpeg", "b.png"]
        assert product_store.get_by_id(created.id) is None
        assert session.exec(select(AssetTable)).all() == []

    def test_delete_is_idempotent(self, product_store):
        created = _create(product_store)

        assert product_store.delete_by_id(created.id) == []
        assert product_store.delete_by_id(created.id) == []
        assert product_store.delete_by_id(999) == []

    def test_delete_leaves_other_products(self, product_store):
        shoes = _create(product_store)
        hat = _create(product_store, "Hat", "12.50")
        product_store.add_asset(hat.id, "hat.png")

        product_store.delete_by_id(shoes.id)

        remaining = product_store.get_all()
        assert [p.id for p in remaining] == [hat.id]
        assert len(remaining[0].assets) == 1

    def test_failed_delete_rolls_back_asset_rows(self, database_service, session):
        """Asset rows deleted before the failure must be restored."""
        store = BrokenProductDeleteStore(database_service)
        created = _create(store)
        store.add_asset(created.id, "a.jpeg")

        with pytest.raises(QueryFailed):
            store.delete_by_id(created.id)

        assert [a.filename for a in store.get_by_id(created.id).assets] == ["a.jpeg"]
        assert len(session.exec(select(ProductTable)).all()) == 1


class TestAddAsset:
    def test_add_asset_returns_row(self, product_store):
        created = _create(product_store)

        asset = product_store.add_asset(created.id, "a.jpeg")

        assert asset.id is not None
        assert asset.product_id == created.id
        assert asset.filename == "a.jpeg"

    def test_add_asset_to_missing_product_fails(self, product_store, session):
        with pytest.raises(QueryFailed):
            product_store.add_asset(999, "a.jpeg")

        assert session.exec(select(AssetTable)).all() == []
