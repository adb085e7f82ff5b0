"""
Cart line pricing.

unit_price is the VAT-inclusive price per unit the customer pays and always
sits on the 5/10 grid. The ex-VAT price, VAT, rounding extra and profit are
derived from it here and nowhere else.
"""

from decimal import Decimal

from pharmapos.core.entities import PricedSaleLine, PriceType, Product
from pharmapos.core.exceptions import (
    InsufficientStockError,
    PriceBelowFloorError,
    ValidationError,
)
from pharmapos.core.services.pricing import (
    minimum_selling_price,
    money,
    round_up_to_5_or_10,
    to_decimal,
    vat_exclusive,
    vat_inclusive,
)


def _check_quantity(product_name: str, quantity: int, available: int | None) -> None:
    if quantity <= 0:
        raise ValidationError("quantity", "Quantity must be greater than zero", quantity)
    if available is not None and quantity > available:
        raise InsufficientStockError(product_name, quantity, available)


def tier_price(product: Product, price_type: PriceType) -> Decimal:
    """VAT-inclusive rounded price of an approved price tier."""
    if price_type == PriceType.DISCOUNTED:
        base = product.discounted_selling_price
    else:
        base = product.selling_price

    if not base or base <= 0:
        raise ValidationError(
            "price_type",
            f"{product.name} has no approved {price_type.value.lower()} price",
            price_type.value,
        )
    return round_up_to_5_or_10(vat_inclusive(base, _vat_rate(product)))


def _vat_rate(product: Product) -> Decimal:
    return to_decimal(product.vat_rate) if product.has_vat else Decimal(0)


def build_sale_line(
    product: Product,
    quantity: int,
    chosen_unit_price: float,
    price_type: PriceType = PriceType.SELLING,
    minimum_margin_percent: float = 33.0,
) -> PricedSaleLine:
    """
    Price one cart line.

    Args:
        product: Current product row (stock and costs as of now)
        quantity: Units sold, 0 < quantity <= current_stock
        chosen_unit_price: VAT-inclusive price per unit picked by the operator
        price_type: Approved tier the operator started from
        minimum_margin_percent: Floor margin over actual cost for overrides

    Returns:
        PricedSaleLine with every derived field populated.

    Raises:
        ValidationError: Bad quantity, price or missing tier
        InsufficientStockError: Quantity above current stock
        PriceBelowFloorError: Override priced below the minimum selling price
    """
    _check_quantity(product.name, quantity, product.current_stock)

    chosen = to_decimal(chosen_unit_price)
    if chosen <= 0:
        raise ValidationError("unit_price", "Price must be greater than zero", chosen_unit_price)

    rate = _vat_rate(product)
    base = (
        product.discounted_selling_price
        if price_type == PriceType.DISCOUNTED
        else product.selling_price
    )
    tier_rounded = tier_price(product, price_type)
    at_tier = chosen == tier_rounded

    # Raw gross before rounding: the tier's exact gross or the override figure
    raw_gross = vat_inclusive(base, rate) if at_tier else chosen
    unit_price = round_up_to_5_or_10(raw_gross)
    ex_vat = money(vat_exclusive(unit_price, rate))
    actual_cost = to_decimal(product.actual_cost)

    approved_discount = price_type == PriceType.DISCOUNTED and at_tier
    floor = minimum_selling_price(actual_cost, minimum_margin_percent)
    if not approved_discount and ex_vat < to_decimal(floor):
        raise PriceBelowFloorError(
            product.name,
            float(chosen),
            float(money(vat_inclusive(floor, rate))),
        )

    return PricedSaleLine(
        product_id=product.id,
        product_name=product.name,
        batch_number=product.batch_number,
        quantity=quantity,
        unit_price=float(money(unit_price)),
        total_price=float(money(unit_price * quantity)),
        selling_price_ex_vat=float(ex_vat),
        vat_amount=float(money(unit_price - ex_vat)),
        final_price_rounded=float(money(unit_price)),
        rounding_extra=float(money(unit_price - raw_gross)),
        profit=float(money((ex_vat - actual_cost) * quantity)),
        price_type_used=price_type,
        actual_cost_at_sale=float(actual_cost),
    )


def rescale_sale_line(
    line: PricedSaleLine,
    quantity: int,
    available_stock: int | None = None,
) -> PricedSaleLine:
    """Change a line's quantity. Unit price and price tier are kept."""
    _check_quantity(line.product_name, quantity, available_stock)

    unit_price = to_decimal(line.unit_price)
    ex_vat = to_decimal(line.selling_price_ex_vat)
    cost = to_decimal(line.actual_cost_at_sale)

    return line.model_copy(
        update={
            "quantity": quantity,
            "total_price": float(money(unit_price * quantity)),
            "profit": float(money((ex_vat - cost) * quantity)),
        }
    )


def cart_total(lines: list[PricedSaleLine]) -> float:
    return float(money(sum((to_decimal(line.total_price) for line in lines), Decimal(0))))
