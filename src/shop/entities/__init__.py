"""Entities module with an entity-centric structure.

Each entity has its own package containing:
- entity.py: Domain model returned to callers
- table.py: Database persistence model
- store.py: Data access layer (where the entity has its own store)
"""

from .service.asset import Asset, AssetTable
from .service.category import Category, CategoryStore, CategoryTable
from .service.product import (
    Product,
    ProductCreate,
    ProductStore,
    ProductTable,
)

__all__ = [
    "Asset",
    "AssetTable",
    "Category",
    "CategoryStore",
    "CategoryTable",
    "Product",
    "ProductCreate",
    "ProductStore",
    "ProductTable",
]
