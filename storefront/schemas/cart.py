from pydantic import BaseModel, ConfigDict
from typing import List
from uuid import UUID

from .products import ProductResponse


class CartLineResponse(BaseModel):
    product_id: UUID
    quantity: int
    product: ProductResponse

    model_config = ConfigDict(from_attributes=True)


class CartResponse(BaseModel):
    items: List[CartLineResponse]
    total_sum: float
    num_items: int
