from dataclasses import dataclass

from src.shop.core.services import DbSessionService
from src.shop.core.services.product_service import ProductService
from src.shop.core.storage import AssetStorage
from src.shop.entities.service.category import CategoryStore
from src.shop.entities.service.product import ProductStore


@dataclass
class ApplicationDependencies:
    product_store: ProductStore
    category_store: CategoryStore
    asset_storage: AssetStorage
    product_service: ProductService
    database_service: DbSessionService | None = None
