"""Asset database table model."""

from sqlmodel import Field, SQLModel


class AssetTable(SQLModel, table=True):
    """Database persistence model for product assets."""

    __tablename__ = "assets"

    id: int | None = Field(default=None, primary_key=True)
    product_id: int = Field(foreign_key="products.id", index=True)
    filename: str
