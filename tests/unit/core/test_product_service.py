"""Unit tests for ProductService orchestration of store and storage."""

from decimal import Decimal

import pytest
from loguru import logger

from src.shop.core.errors import InvalidMimeType, MultipartFieldMissing, QueryFailed
from src.shop.core.services.product_service import ProductService
from src.shop.entities.service.product import InMemoryProductStore, ProductCreate
from tests.fixtures.dummies import (
    CrashingAssetInsertStore,
    FailingAssetInsertStore,
    RecordingAssetStorage,
    UnreadableAssetStorage,
)


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def storage() -> RecordingAssetStorage:
    return RecordingAssetStorage()


@pytest.fixture
def service(storage) -> ProductService:
    return ProductService(InMemoryProductStore(), storage)


def _shoes() -> ProductCreate:
    return ProductCreate(name="Shoes", price=Decimal("49.99"))


class TestProductCrud:
    """Plain product operations pass through to the store."""

    def test_create_and_get(self, service):
        created = service.create_product(_shoes())

        assert created.id == 1
        assert service.get_product(created.id) == created
        assert service.list_products() == [created]

    def test_get_missing(self, service):
        assert service.get_product(42) is None

    def test_update(self, service):
        created = service.create_product(_shoes())

        updated = service.update_product(
            created.id, ProductCreate(name="Boots", price=Decimal("89.00"))
        )

        assert updated.name == "Boots"
        assert updated.price == Decimal("89.00")

    def test_update_missing(self, service):
        assert service.update_product(42, _shoes()) is None


class TestAddAsset:
    """Tests for attaching an uploaded image to a product."""

    def test_attaches_asset(self, service, storage, make_upload):
        product = service.create_product(_shoes())

        asset = service.add_asset(product.id, make_upload())

        assert asset.product_id == product.id
        assert storage.exists(asset.filename)
        assert service.get_product(product.id).assets == [asset]

    def test_invalid_upload_touches_nothing(self, service, storage, make_upload):
        product = service.create_product(_shoes())

        with pytest.raises(InvalidMimeType):
            service.add_asset(product.id, make_upload(b"hi", "text/plain"))
        with pytest.raises(MultipartFieldMissing):
            service.add_asset(product.id, None)

        assert storage.filenames == []
        assert service.get_product(product.id).assets == []

    def test_failed_insert_removes_file(self, make_upload, log_records):
        """A failed row insert must not leave the saved file behind."""
        store = FailingAssetInsertStore()
        storage = RecordingAssetStorage()
        service = ProductService(store, storage)
        product = service.create_product(_shoes())

        with pytest.raises(QueryFailed):
            service.add_asset(product.id, make_upload())

        (_, filename), = store.add_asset_calls
        assert storage.deleted == [filename]
        assert storage.filenames == []
        assert any(
            r["message"] == "Removed asset file after failed insert" for r in log_records
        )

    def test_missing_product_removes_file(self, service, storage, make_upload):
        with pytest.raises(QueryFailed):
            service.add_asset(999, make_upload())

        assert len(storage.deleted) == 1
        assert storage.filenames == []

    def test_failed_compensation_keeps_original_error(self, make_upload, log_records):
        """A compensation failure is logged and the store error still surfaces."""
        store = FailingAssetInsertStore()
        storage = RecordingAssetStorage(fail_deletes=True)
        service = ProductService(store, storage)
        product = service.create_product(_shoes())

        with pytest.raises(QueryFailed, match="Database query failed"):
            service.add_asset(product.id, make_upload())

        (_, filename), = store.add_asset_calls
        assert storage.deleted == [filename]
        assert storage.filenames == [filename]
        warnings = [r for r in log_records if r["level"].name == "WARNING"]
        assert any("orphaned" in r["message"] for r in warnings)
        assert warnings[-1]["extra"]["filename"] == filename
        assert warnings[-1]["exception"] is not None

    def test_non_store_insert_failure_removes_file(self, make_upload):
        """Cleanup does not depend on the kind of insert failure."""
        storage = RecordingAssetStorage()
        service = ProductService(CrashingAssetInsertStore(), storage)
        product = service.create_product(_shoes())

        with pytest.raises(RuntimeError, match="driver crashed"):
            service.add_asset(product.id, make_upload())

        assert len(storage.deleted) == 1
        assert storage.filenames == []

    def test_unexpected_storage_error_keeps_original_error(self, make_upload, log_records):
        """A delete failing with an OS error must not replace the store error."""
        storage = UnreadableAssetStorage()
        service = ProductService(FailingAssetInsertStore(), storage)
        product = service.create_product(_shoes())

        with pytest.raises(QueryFailed):
            service.add_asset(product.id, make_upload())

        assert len(storage.filenames) == 1
        warnings = [r for r in log_records if r["level"].name == "WARNING"]
        assert any("orphaned" in r["message"] for r in warnings)
        assert warnings[-1]["exception"].type is PermissionError


class TestDeleteProduct:
    """Tests for deleting a product and its files."""

    def test_removes_asset_files(self, service, storage, make_upload):
        product = service.create_product(_shoes())
        first = service.add_asset(product.id, make_upload())
        second = service.add_asset(product.id, make_upload())

        service.delete_product(product.id)

        assert service.get_product(product.id) is None
        assert storage.deleted == [first.filename, second.filename]
        assert storage.filenames == []

    def test_file_removal_failure_is_not_raised(self, make_upload, log_records):
        storage = RecordingAssetStorage()
        service = ProductService(InMemoryProductStore(), storage)
        product = service.create_product(_shoes())
        asset = service.add_asset(product.id, make_upload())
        storage.fail_deletes = True

        service.delete_product(product.id)

        assert service.get_product(product.id) is None
        assert storage.filenames == [asset.filename]
        assert any(
            r["message"] == "Could not remove asset file of deleted product"
            for r in log_records
        )

    def test_missing_product_is_a_no_op(self, service, storage):
        service.delete_product(42)

        assert storage.deleted == []
