"""Credit note (return to supplier) domain entities."""

from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator


class CreditNoteItem(BaseModel):
    """A returned product line."""

    id: int | None = None
    credit_note_id: int | None = None
    product_id: int
    product_name: str
    batch_number: str = ""
    quantity: int = Field(..., gt=0)
    cost_price: float = Field(..., ge=0)
    total_credit: float = 0.0  # quantity * cost_price
    reason: str

    @model_validator(mode="after")
    def compute_total(self) -> "CreditNoteItem":
        self.total_credit = round(self.quantity * self.cost_price, 2)
        return self


class CreditNote(BaseModel):
    """A return-to-supplier record that decreases inventory."""

    id: int | None = None
    credit_note_number: str
    invoice_number: str
    supplier: str
    return_date: date = Field(default_factory=date.today)
    total_amount: float = 0.0
    reason: str = "Return"
    user_id: str | None = None
    user_name: str | None = None
    items: list[CreditNoteItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
