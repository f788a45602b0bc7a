from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime
from uuid import UUID


class OrderLineResponse(BaseModel):
    product_id: UUID
    product: Dict[str, Any]
    quantity: int
    reviewed: bool

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    id: UUID
    user_email: str
    user_name: str
    lines: List[OrderLineResponse]
    total_amount: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
