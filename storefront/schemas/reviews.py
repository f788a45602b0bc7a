from pydantic import BaseModel, ConfigDict, Field
from typing import ClassVar, Dict

from ..core.config import settings


class ReviewForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    field_messages: ClassVar[Dict[str, str]] = {
        "review": "A review should be at least 3 characters long",
        "rating": f"Please give a rating from {settings.MIN_RATING} to {settings.MAX_RATING}",
    }

    review: str = Field(..., min_length=3)
    rating: int = Field(..., ge=settings.MIN_RATING, le=settings.MAX_RATING)
    product_id: str = Field(..., alias="productId")
    order_id: str = Field(..., alias="orderId")
