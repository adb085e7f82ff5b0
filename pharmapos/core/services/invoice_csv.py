"""
Invoice line ingestion.

Turns operator-entered drafts and supplier CSV files into priced
InvoiceItem objects. Both paths go through build_invoice_item so a line
priced by hand and the same line imported from CSV come out identical.
"""

import csv
import io
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from pharmapos.config import get_logger
from pharmapos.core.entities import InvoiceItem
from pharmapos.core.exceptions import (
    CSVImportError,
    PriceBelowFloorError,
    ValidationError,
)
from pharmapos.core.services.pricing import (
    compute_pricing,
    gross_profit_margin,
    minimum_selling_price,
    money,
    validate_discounted_price,
)

logger = get_logger(__name__)

REQUIRED_HEADERS = ["productname", "category", "batchnumber", "expirydate", "quantity"]
PRICE_HEADERS = ["costprice", "invoiceprice"]

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")


@dataclass(frozen=True)
class ItemDefaults:
    """Fallbacks applied to lines that leave a field blank."""

    vat_rate: float = 16.0
    minimum_margin_percent: float = 33.0
    default_expiry_days: int = 365
    category: str = "General"


class InvoiceItemDraft(BaseModel):
    """An invoice line as entered, before pricing."""

    product_name: str
    category: str | None = None
    batch_number: str = ""
    expiry_date: date | None = None
    quantity: int
    cost_price: float
    supplier_discount_percent: float = 0.0
    vat_rate: float | None = None
    # Manual overrides; the computed price is used when absent
    selling_price: float | None = None
    discounted_selling_price: float | None = None
    barcode: str | None = None


class SkippedRow(BaseModel):
    row: int
    reason: str


class ParsedInvoiceCSV(BaseModel):
    """Preview of a CSV import. Nothing has been committed."""

    items: list[InvoiceItem] = Field(default_factory=list)
    invoice_number: str | None = None
    supplier: str | None = None
    invoice_date: date | None = None
    skipped_rows: list[SkippedRow] = Field(default_factory=list)

    @property
    def total_amount(self) -> float:
        return round(sum(i.total_cost for i in self.items), 2)


def synthesize_barcode() -> str:
    return f"BC-{uuid.uuid4().hex[:12].upper()}"


def build_invoice_item(
    draft: InvoiceItemDraft, defaults: ItemDefaults | None = None
) -> InvoiceItem:
    """
    Price a draft line.

    Raises:
        ValidationError: Missing name, non-positive quantity or cost,
            or a discounted selling price above the selling price
        PriceBelowFloorError: Manual selling price below the minimum
    """
    defaults = defaults or ItemDefaults()

    name = draft.product_name.strip()
    if not name:
        raise ValidationError("product_name", "Please fill in product name and quantity")
    if draft.quantity <= 0:
        raise ValidationError("quantity", "Quantity must be greater than zero", draft.quantity)
    if draft.cost_price <= 0:
        raise ValidationError(
            "cost_price",
            "Please fill in either Invoice Price or Cost Price",
            draft.cost_price,
        )

    vat_rate = draft.vat_rate if draft.vat_rate is not None else defaults.vat_rate
    pricing = compute_pricing(draft.cost_price, draft.supplier_discount_percent, vat_rate)

    selling_price = pricing.selling_price
    vat = pricing.vat
    margin = pricing.gross_profit_margin

    if draft.selling_price is not None:
        floor = minimum_selling_price(
            pricing.discounted_cost_price, defaults.minimum_margin_percent
        )
        if draft.selling_price < floor:
            raise PriceBelowFloorError(name, draft.selling_price, floor)
        selling_price = float(money(draft.selling_price))
        vat = float(money(selling_price * vat_rate / 100)) if vat_rate > 0 else 0.0
        margin = gross_profit_margin(selling_price, pricing.discounted_cost_price)

    discounted_selling = draft.discounted_selling_price
    if discounted_selling is not None:
        if not validate_discounted_price(selling_price, discounted_selling):
            raise ValidationError(
                "discounted_selling_price",
                "Discounted selling price cannot exceed the selling price",
                discounted_selling,
            )
        discounted_selling = float(money(discounted_selling))

    return InvoiceItem(
        product_name=name,
        category=(draft.category or "").strip() or defaults.category,
        batch_number=draft.batch_number.strip(),
        expiry_date=draft.expiry_date
        or date.today() + timedelta(days=defaults.default_expiry_days),
        quantity=draft.quantity,
        cost_price=float(money(draft.cost_price)),
        discounted_cost_price=pricing.discounted_cost_price,
        selling_price=selling_price,
        discounted_selling_price=discounted_selling,
        vat=vat,
        gross_profit_margin=margin,
        supplier_discount_percent=draft.supplier_discount_percent,
        vat_rate=vat_rate,
        barcode=(draft.barcode or "").strip() or synthesize_barcode(),
    )


# CSV helpers


def normalize_header(header: str) -> str:
    return "".join(header.split()).replace("_", "").lower()


def _to_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _to_float(value: Any) -> float | None:
    text = _to_text(value)
    if text is None:
        return None
    return float(text.replace(",", ""))


def _to_int(value: Any) -> int | None:
    number = _to_float(value)
    if number is None:
        return None
    return int(number)


def parse_date(value: Any) -> date | None:
    """Parse ISO or day-first dates; None when blank."""
    text = _to_text(value)
    if text is None:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {text}")


def _read_rows(content: str | bytes) -> list[list[str]]:
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVImportError("CSV file must be UTF-8 encoded") from e
    reader = csv.reader(io.StringIO(content))
    return [row for row in reader if any(cell.strip() for cell in row)]


def _draft_from_row(row: dict[str, str]) -> InvoiceItemDraft:
    cost = _to_float(row.get("costprice"))
    if not cost:
        cost = _to_float(row.get("invoiceprice"))

    return InvoiceItemDraft(
        product_name=row.get("productname", ""),
        category=_to_text(row.get("category")),
        batch_number=row.get("batchnumber", ""),
        expiry_date=parse_date(row.get("expirydate")),
        quantity=_to_int(row.get("quantity")) or 0,
        cost_price=cost or 0.0,
        supplier_discount_percent=_to_float(row.get("supplierdiscountpercent")) or 0.0,
        vat_rate=_to_float(row.get("vatrate")),
        selling_price=_to_float(row.get("sellingprice")),
        discounted_selling_price=_to_float(row.get("discountedsellingprice")),
        barcode=_to_text(row.get("barcode")),
    )


def parse_invoice_csv(
    content: str | bytes, defaults: ItemDefaults | None = None
) -> ParsedInvoiceCSV:
    """
    Parse a supplier invoice CSV into priced items.

    Row numbers in skipped_rows count the header as row 1. Invoice number,
    supplier and invoice date are read from the first data row.

    Raises:
        CSVImportError: Empty file or missing required columns
    """
    rows = _read_rows(content)
    if len(rows) < 2:
        raise CSVImportError("CSV file is empty or invalid")

    headers = [normalize_header(h) for h in rows[0]]
    missing = [h for h in REQUIRED_HEADERS if h not in headers]
    if missing or not any(h in headers for h in PRICE_HEADERS):
        raise CSVImportError(
            "CSV must have columns: ProductName, Category, BatchNumber, ExpiryDate, "
            "Quantity, and either InvoicePrice or CostPrice. "
            "Optional: InvoiceNumber, Supplier, InvoiceDate"
        )

    result = ParsedInvoiceCSV()

    for index, values in enumerate(rows[1:], start=2):
        row = {h: (values[i].strip() if i < len(values) else "") for i, h in enumerate(headers)}

        if index == 2:
            result.invoice_number = _to_text(row.get("invoicenumber"))
            result.supplier = _to_text(row.get("supplier"))
            try:
                result.invoice_date = parse_date(row.get("invoicedate"))
            except ValueError:
                logger.warning("csv_invalid_invoice_date", value=row.get("invoicedate"))

        if not row.get("productname") or not row.get("quantity"):
            result.skipped_rows.append(
                SkippedRow(row=index, reason="Missing product name or quantity")
            )
            continue
        if not row.get("costprice") and not row.get("invoiceprice"):
            result.skipped_rows.append(
                SkippedRow(row=index, reason="Missing invoice price or cost price")
            )
            continue

        try:
            item = build_invoice_item(_draft_from_row(row), defaults)
        except ValidationError as e:
            result.skipped_rows.append(SkippedRow(row=index, reason=e.details["message"]))
            continue
        except ValueError as e:
            result.skipped_rows.append(SkippedRow(row=index, reason=str(e)))
            continue

        result.items.append(item)

    logger.info(
        "invoice_csv_parsed",
        items=len(result.items),
        skipped=len(result.skipped_rows),
        invoice_number=result.invoice_number,
    )
    return result
