"""Entity package: Category."""

from .entity import Category
from .store import CategoryStore, SqlCategoryStore
from .table import CategoryTable
from .tree import build_forest, build_subtree

__all__ = [
    "Category",
    "CategoryStore",
    "CategoryTable",
    "SqlCategoryStore",
    "build_forest",
    "build_subtree",
]
