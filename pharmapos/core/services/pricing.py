"""
Product pricing calculations.

A fixed 1.33 markup is applied to the supplier-discounted cost and the result
is rounded up to a price ending in 0 or 5. Arithmetic is done in Decimal and
money is quantized to cents, so identical inputs always produce identical
outputs whether a line was typed in or imported from CSV.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Any

from pharmapos.core.exceptions import ValidationError

MARKUP_MULTIPLIER = Decimal("1.33")

_ZERO = Decimal(0)
_FIVE = Decimal(5)
_TEN = Decimal(10)
_HUNDRED = Decimal(100)
_CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert a number to Decimal via its string form (no binary float noise)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Any) -> Decimal:
    """Quantize to cents, half up."""
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def round_up_to_5_or_10(value: Any) -> Decimal:
    """
    Round a price up so it ends in 0 or 5.

    If the ones digit (value mod 10) is at most 5 the price goes up to the
    next multiple of 5, otherwise to the next multiple of 10. Exact
    multiples are left alone; the result is never below the input.
    """
    amount = to_decimal(value)
    ones = amount % _TEN
    step = _FIVE if ones <= _FIVE else _TEN
    return (amount / step).to_integral_value(rounding=ROUND_CEILING) * step


def vat_inclusive(price: Any, vat_rate: Any) -> Decimal:
    """Gross price for a VAT-exclusive price."""
    rate = to_decimal(vat_rate)
    amount = to_decimal(price)
    if rate <= _ZERO:
        return amount
    return amount * (1 + rate / _HUNDRED)


def vat_exclusive(price: Any, vat_rate: Any) -> Decimal:
    """Net price for a VAT-inclusive price."""
    rate = to_decimal(vat_rate)
    amount = to_decimal(price)
    if rate <= _ZERO:
        return amount
    return amount / (1 + rate / _HUNDRED)


def gross_profit_margin(selling_price: Any, discounted_cost_price: Any) -> float:
    """Margin over discounted cost, in percent, to 2 dp."""
    cost = to_decimal(discounted_cost_price)
    if cost <= _ZERO:
        return 0.0
    selling = to_decimal(selling_price)
    return float(money((selling - cost) / cost * _HUNDRED))


def minimum_selling_price(actual_cost: Any, minimum_margin_percent: Any) -> float:
    """Lowest VAT-exclusive price an operator may charge for a unit."""
    cost = to_decimal(actual_cost)
    if cost <= _ZERO:
        return 0.0
    return float(money(cost * (1 + to_decimal(minimum_margin_percent) / _HUNDRED)))


def validate_discounted_price(selling_price: float, discounted_price: float | None) -> bool:
    """A discounted price, when set, may not exceed the selling price."""
    if discounted_price is None:
        return True
    return selling_price >= discounted_price


def format_kes(amount: float, currency: str = "KES") -> str:
    return f"{currency} {amount:,.2f}"


@dataclass(frozen=True)
class PricingResult:
    """Derived prices for one cost price and discount/VAT pair."""

    discounted_cost_price: float
    selling_price_before_vat: float
    selling_price: float
    vat: float
    gross_profit_margin: float
    computed: bool = True

    @classmethod
    def not_computed(cls) -> "PricingResult":
        """Result for a non-positive cost: every field zero, computed=False."""
        return cls(
            discounted_cost_price=0.0,
            selling_price_before_vat=0.0,
            selling_price=0.0,
            vat=0.0,
            gross_profit_margin=0.0,
            computed=False,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def compute_pricing(
    cost_price: float,
    supplier_discount_percent: float = 0.0,
    vat_rate: float = 0.0,
) -> PricingResult:
    """
    Derive discounted cost, selling price, VAT and margin from a cost price.

    Args:
        cost_price: Supplier cost per unit before discount
        supplier_discount_percent: Discount off the cost, 0 <= d < 100
        vat_rate: VAT percentage charged on the selling price

    Returns:
        PricingResult. A cost of zero or less yields PricingResult.not_computed(),
        which callers must not treat as a valid zero price.
    """
    cost = to_decimal(cost_price)
    discount = to_decimal(supplier_discount_percent or 0)
    rate = to_decimal(vat_rate or 0)

    if discount < _ZERO or discount >= _HUNDRED:
        raise ValidationError(
            "supplier_discount_percent",
            "Discount must be at least 0 and below 100",
            supplier_discount_percent,
        )
    if rate < _ZERO or rate > _HUNDRED:
        raise ValidationError("vat_rate", "VAT rate must be between 0 and 100", vat_rate)

    if cost <= _ZERO:
        return PricingResult.not_computed()

    # Markup and rounding use the exact discounted cost; only outputs are quantized
    exact_discounted = cost * (1 - discount / _HUNDRED) if discount > _ZERO else cost
    discounted = money(exact_discounted)

    before_vat = exact_discounted * MARKUP_MULTIPLIER
    selling = round_up_to_5_or_10(before_vat)
    vat = selling * rate / _HUNDRED if rate > _ZERO else _ZERO

    return PricingResult(
        discounted_cost_price=float(discounted),
        selling_price_before_vat=float(money(before_vat)),
        selling_price=float(money(selling)),
        vat=float(money(vat)),
        gross_profit_margin=gross_profit_margin(selling, discounted),
    )


@dataclass(frozen=True)
class ProfitBreakdown:
    """Where the profit on a set of sale lines came from."""

    total_revenue: float
    total_profit: float
    discount_driven_profit: float
    rounding_driven_profit: float
    base_profit: float
    average_margin: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def profit_breakdown(lines: list[dict[str, Any]]) -> ProfitBreakdown:
    """
    Split realised profit into base, supplier-discount and rounding parts.

    Each line is a mapping with quantity, profit, selling_price_ex_vat,
    rounding_extra and actual_cost_at_sale. An optional original_cost (the
    undiscounted cost price) attributes the supplier discount, marked up,
    to discount-driven profit.
    """
    revenue = _ZERO
    profit = _ZERO
    discount_profit = _ZERO
    rounding_profit = _ZERO

    for line in lines:
        quantity = to_decimal(line.get("quantity") or 0)
        actual_cost = to_decimal(line.get("actual_cost_at_sale") or 0)
        original_cost = line.get("original_cost")

        profit += to_decimal(line.get("profit") or 0)
        revenue += to_decimal(line.get("selling_price_ex_vat") or 0) * quantity
        rounding_profit += to_decimal(line.get("rounding_extra") or 0) * quantity

        if original_cost and actual_cost > _ZERO:
            savings = to_decimal(original_cost) - actual_cost
            if savings > _ZERO:
                discount_profit += savings * MARKUP_MULTIPLIER * quantity

    base = profit - discount_profit - rounding_profit
    margin = profit / revenue * _HUNDRED if revenue > _ZERO else _ZERO

    return ProfitBreakdown(
        total_revenue=float(money(revenue)),
        total_profit=float(money(profit)),
        discount_driven_profit=float(money(discount_profit)),
        rounding_driven_profit=float(money(rounding_profit)),
        base_profit=float(money(base)),
        average_margin=float(money(margin)),
    )
