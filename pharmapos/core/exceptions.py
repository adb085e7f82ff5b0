"""
Domain exceptions for the PharmaPOS application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class PharmaPOSError(Exception):
    """Base exception for all PharmaPOS errors."""

    # Title of the alert shown to the operator for this error
    title: str = "PharmaPOS"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(PharmaPOSError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class RecordNotFoundError(StorageError):
    """Record not found in storage."""

    def __init__(self, table: str, record_id: Any, code: str = "RECORD_NOT_FOUND"):
        super().__init__(
            f"{table} record not found: {record_id}",
            code=code,
            details={"table": table, "id": record_id},
        )


class ProductNotFoundError(RecordNotFoundError):
    """Product not found."""

    title = "Inventory"

    def __init__(self, product_id: Any):
        super().__init__("products", product_id, code="PRODUCT_NOT_FOUND")
        self.message = f"Product not found: {product_id}"
        self.args = (self.message,)


class InvoiceNotFoundError(RecordNotFoundError):
    """Supplier invoice not found."""

    title = "Invoice Management"

    def __init__(self, invoice_id: Any):
        super().__init__("invoices", invoice_id, code="INVOICE_NOT_FOUND")
        self.message = f"Invoice not found: {invoice_id}"
        self.args = (self.message,)


class CreditNoteNotFoundError(RecordNotFoundError):
    """Credit note not found."""

    title = "Credit Notes"

    def __init__(self, credit_note_id: Any):
        super().__init__("credit_notes", credit_note_id, code="CREDIT_NOTE_NOT_FOUND")
        self.message = f"Credit note not found: {credit_note_id}"
        self.args = (self.message,)


class SaleNotFoundError(RecordNotFoundError):
    """Sale not found."""

    title = "Point of Sale"

    def __init__(self, sale_id: Any):
        super().__init__("sales", sale_id, code="SALE_NOT_FOUND")
        self.message = f"Sale not found: {sale_id}"
        self.args = (self.message,)


# Commit Exceptions
class CommitError(PharmaPOSError):
    """A multi-step commit failed after mutating state."""

    def __init__(
        self,
        message: str,
        code: str,
        cause: str | None = None,
        rollback_failures: list[str] | None = None,
    ):
        super().__init__(
            message,
            code=code,
            details={
                "cause": cause,
                "rollback_failures": rollback_failures or [],
            },
        )


class InvoiceRolledBackError(CommitError):
    """Invoice commit failed and its changes were rolled back."""

    title = "Invoice Management"

    def __init__(
        self,
        friendly_error: str | None = None,
        cause: str | None = None,
        rollback_failures: list[str] | None = None,
    ):
        message = "Failed to save invoice. Changes have been rolled back."
        if friendly_error:
            message = f"{message} {friendly_error}"
        super().__init__(
            message,
            code="INVOICE_ROLLED_BACK",
            cause=cause,
            rollback_failures=rollback_failures,
        )


class SaleRolledBackError(CommitError):
    """Sale checkout failed and its changes were rolled back."""

    title = "Point of Sale"

    def __init__(
        self,
        friendly_error: str | None = None,
        cause: str | None = None,
        rollback_failures: list[str] | None = None,
    ):
        message = "Error processing sale. Changes have been rolled back."
        if friendly_error:
            message = f"{message} {friendly_error}"
        super().__init__(
            message,
            code="SALE_ROLLED_BACK",
            cause=cause,
            rollback_failures=rollback_failures,
        )


class InvalidTransitionError(PharmaPOSError):
    """Commit state machine received an illegal transition."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Illegal commit transition {current} -> {target}",
            code="INVALID_TRANSITION",
            details={"current": current, "target": target},
        )


# Validation Exceptions
class ValidationError(PharmaPOSError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class PriceBelowFloorError(ValidationError):
    """Chosen selling price is below the product's minimum selling price."""

    title = "Point of Sale"

    def __init__(self, product_name: str, price: float, minimum: float):
        super().__init__(
            field="unit_price",
            message=(
                f"Price for {product_name} cannot be less than minimum "
                f"selling price: {minimum:.2f}"
            ),
            value=price,
        )
        self.code = "PRICE_BELOW_FLOOR"
        self.details.update({"product_name": product_name, "minimum": minimum})


class InsufficientStockError(ValidationError):
    """Requested quantity exceeds available stock."""

    title = "Inventory"

    def __init__(
        self,
        product_name: str,
        requested: float,
        available: float,
        verb: str = "Requested",
    ):
        super().__init__(
            field="quantity",
            message=(
                f"Insufficient stock for {product_name}. "
                f"Available: {available}, {verb}: {requested}"
            ),
            value=requested,
        )
        self.code = "INSUFFICIENT_STOCK"
        self.details.update(
            {
                "product_name": product_name,
                "requested": requested,
                "available": available,
            }
        )


class CSVImportError(ValidationError):
    """CSV invoice import could not be parsed."""

    title = "Invoice Management"

    def __init__(self, message: str, row: int | None = None):
        super().__init__(field="file", message=message, value=row)
        self.code = "CSV_IMPORT_ERROR"
        self.details["row"] = row


class UnsupportedFileTypeError(ValidationError):
    """File type is not supported."""

    def __init__(self, filename: str, extension: str, allowed: list[str]):
        super().__init__(
            field="file",
            message=f"Unsupported file type '{extension}'. Allowed: {', '.join(allowed)}",
        )
        self.details.update(
            {
                "filename": filename,
                "extension": extension,
                "allowed": allowed,
            }
        )


class FileTooLargeError(ValidationError):
    """Uploaded file exceeds size limit."""

    def __init__(self, filename: str, size: int, max_size: int):
        super().__init__(
            field="file",
            message=f"File '{filename}' is too large ({size} bytes, max {max_size})",
        )
        self.details.update({"filename": filename, "size": size, "max_size": max_size})

