"""Category database table model."""

from sqlmodel import Field, SQLModel


class CategoryTable(SQLModel, table=True):
    """Database persistence model for categories (self-referencing tree)."""

    __tablename__ = "categories"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    parent_id: int | None = Field(default=None, foreign_key="categories.id", index=True)
