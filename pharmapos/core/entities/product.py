"""Product (stocked batch) domain entity."""

from datetime import date, datetime

from pydantic import BaseModel, Field, computed_field


class Product(BaseModel):
    """A stocked product batch, keyed by (name, batch_number)."""

    id: int | None = None
    name: str
    category: str = "General"
    supplier: str | None = None
    batch_number: str = ""
    expiry_date: date | None = None
    current_stock: int = Field(default=0, ge=0)
    min_stock_level: int = 10

    cost_price: float = 0.0
    discounted_cost_price: float | None = None
    selling_price: float = 0.0
    discounted_selling_price: float | None = None
    supplier_discount_percent: float = 0.0
    vat_rate: float = 16.0

    barcode: str = ""
    invoice_number: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_vat(self) -> bool:
        return self.vat_rate > 0

    @property
    def actual_cost(self) -> float:
        """Cost the pharmacy actually paid per unit, after supplier discount."""
        if self.discounted_cost_price is not None:
            return self.discounted_cost_price
        return self.cost_price

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock_level
