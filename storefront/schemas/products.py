from pydantic import BaseModel, ConfigDict, Field
from typing import ClassVar, Dict, Iterable, List, Optional
from datetime import datetime
from uuid import UUID

from ..products.models import ProductCategory


class ProductForm(BaseModel):
    """Fields of the add/edit product form. The image travels separately as an upload."""
    model_config = ConfigDict(str_strip_whitespace=True)

    field_messages: ClassVar[Dict[str, str]] = {
        "title": "A title should be at least 3 characters long",
        "price": "The price should be a float",
        "description": "A description should be at least 5 characters long.",
        "quantity": "Quantity should be an Integer",
        "category": "Please select a category",
    }

    title: str = Field(..., min_length=3)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    description: str = Field(..., min_length=5)
    quantity: int = Field(..., ge=0)
    category: ProductCategory


class ProductResponse(BaseModel):
    id: UUID
    title: str
    image_url: str
    price: float
    description: str
    quantity: int
    category: str
    rating: float
    user_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReviewAuthor(BaseModel):
    id: UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(BaseModel):
    id: UUID
    review: str
    rating: int
    author: ReviewAuthor
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def product_list(products: Iterable) -> List[ProductResponse]:
    return [ProductResponse.model_validate(product) for product in products]
