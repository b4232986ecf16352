"""Cart and order pricing.

This module is the single implementation of the price formula. The quote
endpoint uses it to show prices while a cart is being built, and order
creation uses it to derive (and check) the totals that are persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from orderdesk.domain.order.delivery import DeliveryLocation, OrderType, delivery_fee_for

TAX_RATE = Decimal("0.08")


class PricedLine(Protocol):
    @property
    def unit_price(self) -> int: ...

    @property
    def quantity(self) -> int: ...


@dataclass(frozen=True)
class CartLine:
    unit_price: int
    quantity: int

    def __post_init__(self) -> None:
        if self.unit_price < 0:
            raise ValueError("unit_price must be >= 0")
        if self.quantity < 1:
            raise ValueError("quantity must be >= 1")


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: int
    delivery_fee: int
    tax: int
    total: int

    def __post_init__(self) -> None:
        if min(self.subtotal, self.delivery_fee, self.tax) < 0:
            raise ValueError("price components must be >= 0")
        if self.total != self.subtotal + self.delivery_fee + self.tax:
            raise ValueError("total must equal subtotal + delivery_fee + tax")


def subtotal_of(lines: Iterable[PricedLine]) -> int:
    return sum(line.unit_price * line.quantity for line in lines)


def tax_for(taxable_amount: int) -> int:
    """8% of the amount, rounded half-up to a whole currency unit."""
    tax = (Decimal(taxable_amount) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(tax)


def compute_totals(
    lines: Iterable[PricedLine],
    order_type: OrderType,
    delivery_location: DeliveryLocation | str | None,
) -> PriceBreakdown:
    subtotal = subtotal_of(lines)
    delivery_fee = delivery_fee_for(order_type, delivery_location)
    tax = tax_for(subtotal + delivery_fee)
    return PriceBreakdown(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        tax=tax,
        total=subtotal + delivery_fee + tax,
    )
