"""Entity package: Asset."""

from .entity import Asset
from .table import AssetTable

__all__ = ["Asset", "AssetTable"]
