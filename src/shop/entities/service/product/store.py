"""Product store: transactional persistence of the Product aggregate.

``ProductStore`` is the narrow interface the service layer depends on.
``SqlProductStore`` is backed by the pooled engine of ``DbSessionService``;
``InMemoryProductStore`` keeps everything in instance-scoped dictionaries and
is meant for tests of the layers above the store.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from decimal import Decimal

from loguru import logger
from sqlmodel import Session, select

from src.shop.core.errors import QueryFailed
from src.shop.core.services.database.db_session import DbSessionService
from src.shop.entities._mapping import map_row
from src.shop.entities.service.asset import Asset, AssetTable

from .entity import Product, ProductCreate
from .table import ProductTable


class ProductStore(ABC):
    """Durable operations on the products/assets relation pair.

    Every operation raises ``ConnectionFailed``, ``QueryFailed`` or
    ``MappingFailed`` on failure and never retries internally. "Not found" is
    never an error: lookups return ``None`` and deletes are no-ops.
    """

    @abstractmethod
    def get_all(self) -> list[Product]:
        """Return every product with its assets, read in one transaction."""

    @abstractmethod
    def get_by_id(self, product_id: int) -> Product | None:
        """Return one product with its assets, or None if it does not exist."""

    @abstractmethod
    def insert(self, data: ProductCreate) -> Product:
        """Insert a product and return it with its generated id.

        ``data`` is validated by the caller; the store does not re-check it.
        """

    @abstractmethod
    def update(self, product_id: int, data: ProductCreate) -> Product | None:
        """Replace name and price, or return None if the product is absent."""

    @abstractmethod
    def delete_by_id(self, product_id: int) -> list[str]:
        """Delete a product together with its asset rows.

        Returns the filenames of the asset rows that were removed so the
        caller can remove the files. Deleting an absent id returns ``[]``.
        """

    @abstractmethod
    def add_asset(self, product_id: int, filename: str) -> Asset:
        """Insert an asset row referencing ``filename``.

        The caller must have written the file to asset storage already.
        """


class SqlProductStore(ProductStore):
    """Product store on top of the pooled SQLModel engine."""

    def __init__(self, database: DbSessionService) -> None:
        self._database = database

    def _get_product_assets(self, session: Session, product_id: int) -> list[Asset]:
        statement = (
            select(AssetTable)
            .where(AssetTable.product_id == product_id)
            .order_by(AssetTable.id)
        )
        return [map_row(Asset, row) for row in session.exec(statement).all()]

    def _assemble(self, session: Session, row: ProductTable) -> Product:
        product = map_row(Product, row)
        product.assets = self._get_product_assets(session, product.id)
        return product

    def get_all(self) -> list[Product]:
        # One session cannot issue statements concurrently, so the per-product
        # asset queries run one after another inside the same transaction.
        with self._database.session_scope() as session:
            rows = session.exec(select(ProductTable).order_by(ProductTable.id)).all()
            return [self._assemble(session, row) for row in rows]

    def get_by_id(self, product_id: int) -> Product | None:
        with self._database.session_scope() as session:
            row = session.get(ProductTable, product_id)
            if row is None:
                return None
            return self._assemble(session, row)

    def insert(self, data: ProductCreate) -> Product:
        with self._database.session_scope() as session:
            row = ProductTable(name=data.name, price=data.price)
            session.add(row)
            session.flush()
            product = map_row(Product, row)

        logger.info("Product created", product_id=product.id)
        return product

    def update(self, product_id: int, data: ProductCreate) -> Product | None:
        with self._database.session_scope() as session:
            row = session.get(ProductTable, product_id)
            if row is None:
                return None
            row.name = data.name
            row.price = data.price
            session.add(row)
            session.flush()
            return self._assemble(session, row)

    def _delete_asset_rows(self, session: Session, product_id: int) -> list[str]:
        rows = session.exec(
            select(AssetTable).where(AssetTable.product_id == product_id)
        ).all()
        for row in rows:
            session.delete(row)
        session.flush()
        return [row.filename for row in rows]

    def _delete_product_row(self, session: Session, product_id: int) -> None:
        row = session.get(ProductTable, product_id)
        if row is not None:
            session.delete(row)
            session.flush()

    def delete_by_id(self, product_id: int) -> list[str]:
        # Asset rows go first so the foreign key never points at a missing
        # product; both deletes commit or roll back together.
        with self._database.session_scope() as session:
            filenames = self._delete_asset_rows(session, product_id)
            self._delete_product_row(session, product_id)

        if filenames:
            logger.info(
                "Product deleted with assets",
                product_id=product_id,
                asset_count=len(filenames),
            )
        return filenames

    def add_asset(self, product_id: int, filename: str) -> Asset:
        with self._database.session_scope() as session:
            row = AssetTable(product_id=product_id, filename=filename)
            session.add(row)
            session.flush()
            return map_row(Asset, row)


class InMemoryProductStore(ProductStore):
    """Dictionary-backed product store for tests.

    State belongs to the instance; a lock makes each operation atomic with
    respect to the others, standing in for the database transaction.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: dict[int, tuple[str, Decimal]] = {}
        self._assets: dict[int, Asset] = {}
        self._next_product_id = 1
        self._next_asset_id = 1

    def _assemble(self, product_id: int) -> Product:
        name, price = self._products[product_id]
        assets = [
            asset.model_copy()
            for asset in sorted(self._assets.values(), key=lambda a: a.id)
            if asset.product_id == product_id
        ]
        return Product(id=product_id, name=name, price=price, assets=assets)

    def get_all(self) -> list[Product]:
        with self._lock:
            return [self._assemble(product_id) for product_id in sorted(self._products)]

    def get_by_id(self, product_id: int) -> Product | None:
        with self._lock:
            if product_id not in self._products:
                return None
            return self._assemble(product_id)

    def insert(self, data: ProductCreate) -> Product:
        with self._lock:
            product_id = self._next_product_id
            self._next_product_id += 1
            self._products[product_id] = (data.name, data.price)
            return self._assemble(product_id)

    def update(self, product_id: int, data: ProductCreate) -> Product | None:
        with self._lock:
            if product_id not in self._products:
                return None
            self._products[product_id] = (data.name, data.price)
            return self._assemble(product_id)

    def delete_by_id(self, product_id: int) -> list[str]:
        with self._lock:
            owned = [a for a in self._assets.values() if a.product_id == product_id]
            for asset in owned:
                del self._assets[asset.id]
            self._products.pop(product_id, None)
            return [asset.filename for asset in sorted(owned, key=lambda a: a.id)]

    def add_asset(self, product_id: int, filename: str) -> Asset:
        with self._lock:
            if product_id not in self._products:
                raise QueryFailed(f"Product {product_id} does not exist")
            asset = Asset(id=self._next_asset_id, product_id=product_id, filename=filename)
            self._next_asset_id += 1
            self._assets[asset.id] = asset
            return asset.model_copy()
