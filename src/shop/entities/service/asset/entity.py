"""Entity: Asset."""

from pydantic import BaseModel, Field


class Asset(BaseModel):
    """Image file attached to a product.

    ``filename`` names a file under the asset storage root; the row is only
    ever created after that file has been written.
    """

    id: int = Field(description="Database-assigned identifier")
    product_id: int = Field(description="Owning product")
    filename: str = Field(description="Generated file name under the asset root")
