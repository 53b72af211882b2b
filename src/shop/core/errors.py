"""Error taxonomy shared by the product store and the asset storage service.

Store and storage errors propagate unchanged to the service layer; the HTTP
layer translates them into status codes (see ``src.shop.api.http.errors``).
"""

from __future__ import annotations


class StoreError(Exception):
    """Base class for persistence failures of the product/category stores."""


class ConnectionFailed(StoreError):
    """No connection could be checked out of the pool, or it broke."""


class QueryFailed(StoreError):
    """A statement (or the commit of a unit of work) failed to execute."""


class MappingFailed(StoreError):
    """A database row could not be converted into its entity."""


class StorageError(Exception):
    """Base class for asset storage failures."""


class InvalidMimeType(StorageError):
    """The upload declared a content type that is not an accepted image type."""

    def __init__(self, content_type: str | None, allowed: list[str]) -> None:
        self.content_type = content_type
        self.allowed = allowed
        super().__init__(
            f"Invalid image mime type. Expected one of {', '.join(allowed)} "
            f"but got {content_type or 'nothing'}."
        )


class MultipartFieldMissing(StorageError):
    """The multipart body has no part carrying the image upload."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Multipart field '{field_name}' is missing")


class AssetIOError(StorageError):
    """A filesystem write or delete under the asset root failed."""
