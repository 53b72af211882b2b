"""Entity: Category."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Category(BaseModel):
    """Node of the category tree. Root categories have no parent."""

    id: int
    name: str
    parent_id: int | None = None
    children: list[Category] = Field(default_factory=list)


Category.model_rebuild()
