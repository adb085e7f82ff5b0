"""Supplier invoice domain entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class InvoiceItem(BaseModel):
    """A single priced line on a supplier invoice."""

    id: int | None = None
    invoice_id: int | None = None
    product_id: int | None = None

    product_name: str
    category: str = "General"
    batch_number: str = ""
    expiry_date: date
    quantity: int = Field(..., gt=0)

    cost_price: float
    discounted_cost_price: float
    selling_price: float
    discounted_selling_price: float | None = None
    vat: float = 0.0
    gross_profit_margin: float = 0.0
    supplier_discount_percent: float = 0.0
    vat_rate: float = 0.0

    total_cost: float = 0.0  # quantity * discounted_cost_price
    barcode: str = ""

    @model_validator(mode="after")
    def compute_total(self) -> "InvoiceItem":
        """Derive total_cost; it is never entered independently."""
        self.total_cost = round(self.quantity * self.discounted_cost_price, 2)
        return self

    def pricing_fields(self) -> dict:
        """Fields copied onto the product row (last invoice wins)."""
        return {
            "cost_price": self.cost_price,
            "discounted_cost_price": self.discounted_cost_price,
            "selling_price": self.selling_price,
            "discounted_selling_price": self.discounted_selling_price,
            "supplier_discount_percent": self.supplier_discount_percent,
            "vat_rate": self.vat_rate,
        }


class Invoice(BaseModel):
    """A supplier purchase invoice that increases inventory."""

    id: int | None = None
    invoice_number: str
    supplier: str
    invoice_date: date = Field(default_factory=date.today)
    total_amount: float = 0.0
    notes: str | None = None
    user_id: str | None = None
    user_name: str | None = None
    items: list[InvoiceItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def compute_total(self) -> "Invoice":
        if self.items:
            self.total_amount = round(sum(i.total_cost for i in self.items), 2)
        return self
