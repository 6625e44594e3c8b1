"""Total Recalculation Engine

Pure functions that derive line and document totals from quantities, prices,
tax rates and the header discount. Totals are always rebuilt from the full
line set, never adjusted by a delta.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Union
from src.domain.errors import ValidationError

MONEY = Decimal("0.01")
QUANTITY = Decimal("0.001")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")

Number = Union[Decimal, int, str]


def to_decimal(value: Number, field: str = "value") -> Decimal:
    if isinstance(value, float):
        # floats carry binary noise, go through their shortest repr
        value = repr(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} is not a valid decimal: {value!r}", field=field)
    if not result.is_finite():
        raise ValidationError(f"{field} must be finite", field=field)
    return result


def money(value: Number) -> Decimal:
    return to_decimal(value).quantize(MONEY, rounding=ROUND_HALF_UP)


def to_quantity(value: Number) -> Decimal:
    return to_decimal(value, "quantity").quantize(QUANTITY, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineTotals:
    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    tax_amount: Decimal
    discount_amount: Decimal
    total_amount: Decimal


def calculate_order_line(quantity: int, unit_price: Number) -> Decimal:
    """Subtotal of an order detail. Quantities are whole cylinders."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Order detail quantity must be a whole number", field="quantity")
    if quantity < 1:
        raise ValidationError("Order detail quantity must be at least 1", field="quantity")
    price = to_decimal(unit_price, "unit_price")
    if price < 0:
        raise ValidationError("Unit price cannot be negative", field="unit_price")
    return money(price * quantity)


def calculate_invoice_line(quantity: Number, unit_price: Number, tax_rate: Number = ZERO) -> LineTotals:
    """
    Derive subtotal, tax and total for a single invoice item

    Tax is rounded per line; document tax is the sum of the rounded line taxes.
    """
    qty = to_quantity(quantity)
    price = to_decimal(unit_price, "unit_price")
    rate = to_decimal(tax_rate, "tax_rate")

    if qty <= 0:
        raise ValidationError("Item quantity must be greater than zero", field="quantity")
    if price < 0:
        raise ValidationError("Unit price cannot be negative", field="unit_price")
    if rate < 0 or rate > HUNDRED:
        raise ValidationError("Tax rate must be between 0 and 100", field="tax_rate")

    subtotal = money(qty * price)
    tax_amount = money(subtotal * rate / HUNDRED)
    return LineTotals(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)


def recalculate(items: Iterable, discount: Optional[Number] = None) -> DocumentTotals:
    """
    Rebuild document totals from every line item

    Args:
        items: objects exposing quantity, unit_price and (optionally) tax_rate
        discount: header discount, defaults to zero

    Returns:
        DocumentTotals with subtotal, tax_amount, discount_amount, total_amount

    Raises:
        ValidationError: if a line is invalid, the discount is negative or
            the discount exceeds subtotal + tax
    """
    discount_amount = money(discount if discount is not None else ZERO)
    if discount_amount < 0:
        raise ValidationError("Discount cannot be negative", field="discount_amount")

    subtotal = ZERO
    tax_amount = ZERO
    for item in items:
        line = calculate_invoice_line(
            item.quantity, item.unit_price, getattr(item, "tax_rate", None) or ZERO
        )
        subtotal += line.subtotal
        tax_amount += line.tax_amount

    total_amount = subtotal + tax_amount - discount_amount
    if total_amount < 0:
        raise ValidationError(
            f"Discount {discount_amount} exceeds invoice amount {subtotal + tax_amount}",
            field="discount_amount",
        )

    return DocumentTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
    )


def apply_line_totals(item) -> None:
    """Write derived subtotal, tax_amount and total onto an invoice item"""
    line = calculate_invoice_line(item.quantity, item.unit_price, item.tax_rate)
    item.subtotal = line.subtotal
    item.tax_amount = line.tax_amount
    item.total = line.total


def order_total(details: Iterable) -> Decimal:
    """Sum of order detail subtotals, each rebuilt from quantity and unit price"""
    total = ZERO
    for detail in details:
        total += calculate_order_line(detail.quantity, detail.unit_price)
    return total
