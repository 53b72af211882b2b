"""Product use cases spanning the product store and the asset storage.

Attaching an asset touches two systems that fail independently: the file is
written first, then the row referencing it is inserted. When the insert
fails the file is removed again, so an asset row exists if and only if its
file exists. The order (file before row) must not be reversed: a crash
between the two steps can then leave at most one orphaned file, never a row
pointing at a missing file.
"""

from loguru import logger
from starlette.datastructures import UploadFile

from src.shop.core.errors import AssetIOError
from src.shop.core.storage.asset_storage import AssetStorage
from src.shop.entities.service.asset import Asset
from src.shop.entities.service.product import Product, ProductCreate, ProductStore


class ProductService:
    def __init__(self, store: ProductStore, storage: AssetStorage) -> None:
        self._store = store
        self._storage = storage

    def list_products(self) -> list[Product]:
        return self._store.get_all()

    def get_product(self, product_id: int) -> Product | None:
        return self._store.get_by_id(product_id)

    def create_product(self, data: ProductCreate) -> Product:
        return self._store.insert(data)

    def update_product(self, product_id: int, data: ProductCreate) -> Product | None:
        return self._store.update(product_id, data)

    def delete_product(self, product_id: int) -> None:
        """Delete a product, its asset rows and then its asset files.

        Rows are removed in one transaction before any file is touched. A file
        that cannot be removed afterwards is logged and left behind as an
        orphan; the deletion itself still succeeds.
        """
        filenames = self._store.delete_by_id(product_id)
        for filename in filenames:
            try:
                self._storage.delete_image(filename)
            except AssetIOError:
                logger.opt(exception=True).warning(
                    "Could not remove asset file of deleted product",
                    product_id=product_id,
                    filename=filename,
                )

    def add_asset(self, product_id: int, upload: UploadFile | None) -> Asset:
        """Store an uploaded image and attach it to a product.

        Raises:
            StorageError: Saving the file failed; nothing was persisted.
            StoreError: Inserting the row failed; the file was removed again
                (or, if that failed too, logged as an orphan). Any other
                insert failure is handled the same way and re-raised as is.
        """
        filename = self._storage.save_image(upload)

        try:
            asset = self._store.add_asset(product_id, filename)
        except Exception:
            self._compensate(filename, product_id)
            raise

        logger.info("Asset attached", product_id=product_id, filename=filename)
        return asset

    def _compensate(self, filename: str, product_id: int) -> None:
        """Remove a file whose asset row could not be inserted.

        Never raises: the insert failure that triggered compensation is the
        error the caller must see. A file that is already gone counts as
        compensated.
        """
        try:
            self._storage.delete_image(filename)
        except Exception:
            if not self._still_stored(filename):
                logger.debug("Asset {} already absent; nothing to compensate", filename)
                return
            logger.opt(exception=True).warning(
                "Compensating delete failed; asset file is orphaned",
                product_id=product_id,
                filename=filename,
            )
        else:
            logger.warning(
                "Removed asset file after failed insert",
                product_id=product_id,
                filename=filename,
            )

    def _still_stored(self, filename: str) -> bool:
        # an unanswerable check counts as present so the orphan gets logged
        try:
            return self._storage.exists(filename)
        except Exception:
            logger.opt(exception=True).debug("Could not check asset {}", filename)
            return True
