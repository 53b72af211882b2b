"""Category API router."""

from fastapi import APIRouter, Depends, HTTPException

from src.shop.api.http.deps import get_category_store
from src.shop.entities.service.category import Category, CategoryStore

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=list[Category])
def list_categories(
    store: CategoryStore = Depends(get_category_store),
) -> list[Category]:
    """List the category forest."""
    return store.get_all()


@router.get("/{category_id}", response_model=Category)
def get_category(
    category_id: int,
    store: CategoryStore = Depends(get_category_store),
) -> Category:
    """Get a category with all of its subcategories."""
    category = store.get_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
