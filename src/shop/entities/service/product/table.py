"""Product database table model."""

from decimal import Decimal

from sqlmodel import Field, SQLModel


class ProductTable(SQLModel, table=True):
    """Database persistence model for products.

    Assets live in their own table and are fetched explicitly by the store;
    no ORM relationship is declared so nothing is ever lazy-loaded.
    """

    __tablename__ = "products"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    price: Decimal = Field(max_digits=10, decimal_places=2)
