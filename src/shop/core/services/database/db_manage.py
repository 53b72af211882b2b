"""Schema management for the catalog tables."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        from src.shop.entities.service.asset import AssetTable  # noqa: F401
        from src.shop.entities.service.category import CategoryTable  # noqa: F401
        from src.shop.entities.service.product import ProductTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")
