"""Category store: read-only access to the category tree."""

from abc import ABC, abstractmethod

from sqlmodel import select

from src.shop.core.services.database.db_session import DbSessionService
from src.shop.entities._mapping import map_row

from .entity import Category
from .table import CategoryTable
from .tree import build_forest, build_subtree


class CategoryStore(ABC):
    @abstractmethod
    def get_all(self) -> list[Category]:
        """Return the category forest."""

    @abstractmethod
    def get_by_id(self, category_id: int) -> Category | None:
        """Return a category with its subtree, or None if it does not exist."""


class SqlCategoryStore(CategoryStore):
    """Category store on top of the pooled SQLModel engine."""

    def __init__(self, database: DbSessionService) -> None:
        self._database = database

    def _load_all(self) -> list[Category]:
        with self._database.session_scope() as session:
            rows = session.exec(select(CategoryTable).order_by(CategoryTable.id)).all()
            return [map_row(Category, row) for row in rows]

    def get_all(self) -> list[Category]:
        return build_forest(self._load_all())

    def get_by_id(self, category_id: int) -> Category | None:
        return build_subtree(self._load_all(), category_id)
