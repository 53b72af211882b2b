"""Asset storage for uploaded product images."""

from .asset_storage import (
    AssetStorage,
    FileSystemAssetStorage,
    InMemoryAssetStorage,
)

__all__ = ["AssetStorage", "FileSystemAssetStorage", "InMemoryAssetStorage"]
