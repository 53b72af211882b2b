"""Entity package: Product."""

from .entity import Product, ProductCreate
from .store import InMemoryProductStore, ProductStore, SqlProductStore
from .table import ProductTable

__all__ = [
    "InMemoryProductStore",
    "Product",
    "ProductCreate",
    "ProductStore",
    "ProductTable",
    "SqlProductStore",
]
