"""Asset storage interface and implementations.

Stores uploaded product images as files under a single root directory, using
generated names so client-supplied filenames never reach the filesystem.
Storage knows nothing about products or the database; keeping files and
asset rows consistent is the job of ``ProductService``.
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from loguru import logger
from starlette.datastructures import UploadFile

from src.shop.core.errors import AssetIOError, InvalidMimeType, MultipartFieldMissing
from src.shop.runtime.config.config_data import AssetsConfig

# File extension written for each accepted content type
EXTENSIONS = {
    "image/jpeg": "jpeg",
    "image/png": "png",
}


def content_type_essence(content_type: str | None) -> str | None:
    """Strip parameters and normalise case: ``Image/JPEG; q=1`` -> ``image/jpeg``."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


class AssetStorage(ABC):
    """Abstract interface for asset storage backends."""

    def __init__(self, config: AssetsConfig) -> None:
        self._config = config

    @property
    def upload_field(self) -> str:
        """Name of the multipart field that carries the image."""
        return self._config.upload_field

    def _validate(self, upload: UploadFile | None) -> tuple[UploadFile, str]:
        if upload is None:
            raise MultipartFieldMissing(self._config.upload_field)

        essence = content_type_essence(upload.content_type)
        allowed = [
            content_type
            for content_type in self._config.allowed_content_types
            if content_type in EXTENSIONS
        ]
        if essence not in allowed:
            logger.info(
                "Rejected upload with content type {}", upload.content_type
            )
            raise InvalidMimeType(upload.content_type, allowed)

        filename = f"{uuid.uuid4()}.{EXTENSIONS[essence]}"
        return upload, filename

    @abstractmethod
    def save_image(self, upload: UploadFile | None) -> str:
        """Validate and store an uploaded image.

        Args:
            upload: The image part located in the multipart body, or None when
                the body has no such part.

        Returns:
            The generated filename, relative to the asset root.

        Raises:
            MultipartFieldMissing: ``upload`` is None.
            InvalidMimeType: The declared content type is not accepted.
            AssetIOError: Writing failed; a partial file may remain.
        """

    @abstractmethod
    def delete_image(self, filename: str) -> None:
        """Remove a stored image.

        Raises:
            AssetIOError: The file does not exist or cannot be removed.
        """

    @abstractmethod
    def exists(self, filename: str) -> bool:
        """Check whether a stored image exists."""


class FileSystemAssetStorage(AssetStorage):
    """Asset storage backed by a flat directory on the local filesystem."""

    def __init__(self, config: AssetsConfig) -> None:
        super().__init__(config)
        self._root = Path(config.root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def _path_for(self, filename: str) -> Path:
        path = (self._root / filename).resolve()
        if path.parent != self._root:
            raise AssetIOError(f"Asset name '{filename}' escapes the asset root")
        return path

    def save_image(self, upload: UploadFile | None) -> str:
        upload, filename = self._validate(upload)
        path = self._root / filename

        try:
            self._root.mkdir(parents=True, exist_ok=True)
            upload.file.seek(0)
            # "xb" refuses to overwrite; a name collision surfaces as an error
            with open(path, "xb") as destination:
                while chunk := upload.file.read(self._config.chunk_size):
                    destination.write(chunk)
        except OSError as e:
            logger.error(
                "Failed to write asset",
                filename=filename,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise AssetIOError(f"Failed to write asset '{filename}'") from e

        logger.info("Stored asset {}", filename)
        return filename

    def delete_image(self, filename: str) -> None:
        path = self._path_for(filename)
        try:
            path.unlink()
        except OSError as e:
            raise AssetIOError(f"Failed to delete asset '{filename}'") from e
        logger.info("Deleted asset {}", filename)

    def exists(self, filename: str) -> bool:
        try:
            return self._path_for(filename).is_file()
        except AssetIOError:
            return False


class InMemoryAssetStorage(AssetStorage):
    """In-memory asset storage for tests."""

    def __init__(self, config: AssetsConfig | None = None) -> None:
        super().__init__(config or AssetsConfig())
        self._lock = threading.Lock()
        self._files: dict[str, bytes] = {}

    def save_image(self, upload: UploadFile | None) -> str:
        upload, filename = self._validate(upload)
        upload.file.seek(0)
        content = upload.file.read()
        with self._lock:
            self._files[filename] = content
        return filename

    def delete_image(self, filename: str) -> None:
        with self._lock:
            if filename not in self._files:
                raise AssetIOError(f"Failed to delete asset '{filename}'")
            del self._files[filename]

    def exists(self, filename: str) -> bool:
        with self._lock:
            return filename in self._files

    def read(self, filename: str) -> bytes:
        with self._lock:
            return self._files[filename]

    @property
    def filenames(self) -> list[str]:
        with self._lock:
            return sorted(self._files)
