"""Entity: Product."""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

from src.shop.entities.service.asset import Asset

# JSON clients receive prices as numbers, not strings
Price = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class Product(BaseModel):
    """Product aggregate: the product row plus the assets it owns.

    ``assets`` is never filled in by row mapping; the store attaches it after
    fetching the asset rows inside the same transaction.
    """

    id: int = Field(description="Database-assigned identifier")
    name: str = Field(description="Product name")
    price: Price = Field(description="Unit price")
    assets: list[Asset] = Field(default_factory=list)


class ProductCreate(BaseModel):
    """Validated input for creating or replacing a product."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
