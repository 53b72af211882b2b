"""Product API router."""

from fastapi import APIRouter, Depends, HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from src.shop.api.http.deps import get_asset_storage, get_product_service
from src.shop.core.services.product_service import ProductService
from src.shop.core.storage import AssetStorage
from src.shop.entities.service.asset import Asset
from src.shop.entities.service.product import Product, ProductCreate

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[Product])
def list_products(
    service: ProductService = Depends(get_product_service),
) -> list[Product]:
    """List all products with their assets."""
    return service.list_products()


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> Product:
    """Get a product by ID."""
    product = service.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
def create_product(
    data: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> Product:
    """Create a new product."""
    return service.create_product(data)


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: int,
    data: ProductCreate,
    service: ProductService = Depends(get_product_service),
) -> Product:
    """Replace a product's name and price."""
    product = service.update_product(product_id, data)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
) -> dict[str, str]:
    """Delete a product and its assets. Deleting a missing product succeeds."""
    service.delete_product(product_id)
    return {"message": "Product deleted successfully"}


@router.post("/{product_id}/assets", response_model=Asset, status_code=201)
async def add_product_asset(
    product_id: int,
    request: Request,
    service: ProductService = Depends(get_product_service),
    storage: AssetStorage = Depends(get_asset_storage),
) -> Asset:
    """Upload an image and attach it to a product."""
    form = await request.form()
    try:
        # the first file part under the field name wins; later ones are ignored
        upload = next(
            (
                part
                for part in form.getlist(storage.upload_field)
                if isinstance(part, UploadFile)
            ),
            None,
        )
        # file and database I/O are blocking; keep them off the event loop
        return await run_in_threadpool(service.add_asset, product_id, upload)
    finally:
        await form.close()
