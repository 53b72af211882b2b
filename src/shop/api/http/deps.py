"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.shop.api.http.app_data import ApplicationDependencies
from src.shop.core.services import DbSessionService
from src.shop.core.services.product_service import ProductService
from src.shop.core.storage import AssetStorage
from src.shop.entities.service.category import CategoryStore


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies assembled at startup."""
    return request.app.state.app_dependencies


def get_product_service(request: Request) -> ProductService:
    """Get the product service instance."""
    return get_app_dependencies(request).product_service


def get_category_store(request: Request) -> CategoryStore:
    """Get the category store instance."""
    return get_app_dependencies(request).category_store


def get_asset_storage(request: Request) -> AssetStorage:
    """Get the asset storage instance."""
    return get_app_dependencies(request).asset_storage


def get_database_service(request: Request) -> DbSessionService | None:
    """Get the database service, None when the stores are not SQL-backed."""
    return get_app_dependencies(request).database_service
