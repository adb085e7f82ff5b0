"""Stock take (physical count) entity."""

from datetime import datetime

from pydantic import BaseModel, Field


class StockTake(BaseModel):
    """A counted quantity and the correction it applied to the product."""

    id: int | None = None
    product_id: int
    product_name: str
    expected_stock: int = Field(..., ge=0)
    actual_stock: int = Field(..., ge=0)
    difference: int  # actual - expected; negative means shrinkage
    reason: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
