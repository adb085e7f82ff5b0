"""Point-of-sale domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class PriceType(str, Enum):
    """Which approved price tier a sale line was charged at."""

    SELLING = "SELLING"
    DISCOUNTED = "DISCOUNTED"


class PaymentMethod(str, Enum):
    """How a sale was paid."""

    CASH = "cash"
    MPESA = "mpesa"
    CARD = "card"
    INSURANCE = "insurance"


class PricedSaleLine(BaseModel):
    """
    A fully priced sale line.

    Every derived field is required, so a line that has not been through
    the cart pricing model cannot be constructed or committed.
    unit_price is VAT-inclusive and equals final_price_rounded.
    """

    id: int | None = None
    sale_id: int | None = None

    product_id: int
    product_name: str
    batch_number: str
    quantity: int = Field(..., gt=0)
    unit_price: float
    total_price: float
    selling_price_ex_vat: float
    vat_amount: float
    final_price_rounded: float
    rounding_extra: float
    profit: float
    price_type_used: PriceType
    actual_cost_at_sale: float


class Sale(BaseModel):
    """A completed checkout."""

    id: int | None = None
    receipt_number: str
    customer_name: str | None = None
    payment_method: PaymentMethod = PaymentMethod.CASH
    total_amount: float = 0.0
    sales_person_id: str | None = None
    sales_person_name: str | None = None
    items: list[PricedSaleLine] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
