"""Cost breakdown for a service order.

The same breakdown backs order editing, invoice printing and payment
settlement. It is computed once when the order detail is saved and persisted;
every later read goes through `stored_breakdown`, which only looks at the
persisted snapshot.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .domain import ServiceOrder
from .errors import ValidationError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class CostLine:
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class CostBreakdown:
    spare_parts_total: Decimal
    service_fee: Decimal
    base_cost: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    grand_total: Decimal

    def as_record(self) -> dict:
        return {
            "spare_parts_total": self.spare_parts_total,
            "service_fee": self.service_fee,
            "base_cost": self.base_cost,
            "tax_rate": self.tax_rate,
            "tax_amount": self.tax_amount,
            "grand_total": self.grand_total,
        }


def aggregate_costs(
    lines: Iterable[CostLine],
    service_fee: Optional[Decimal],
    tax_rate: Optional[Decimal],
) -> CostBreakdown:
    """Compute subtotal, tax and grand total.

    `service_fee` and `tax_rate` of None count as zero. Tax is taken on the
    base cost and added to it in two steps; the result is not rounded.
    A tax rate above 100 is accepted as is.
    """
    fee = ZERO if service_fee is None else service_fee
    rate = ZERO if tax_rate is None else tax_rate
    if fee < 0:
        raise ValidationError("Service fee cannot be negative.")
    if rate < 0:
        raise ValidationError("Tax rate cannot be negative.")

    spare_parts_total = ZERO
    for line in lines:
        if line.quantity < 0:
            raise ValidationError("Line item quantity cannot be negative.")
        if line.unit_price < 0:
            raise ValidationError("Line item unit price cannot be negative.")
        spare_parts_total += line.line_total

    base_cost = spare_parts_total + fee
    tax_amount = base_cost * rate / HUNDRED
    return CostBreakdown(
        spare_parts_total=spare_parts_total,
        service_fee=fee,
        base_cost=base_cost,
        tax_rate=rate,
        tax_amount=tax_amount,
        grand_total=base_cost + tax_amount,
    )


def stored_breakdown(order: ServiceOrder) -> CostBreakdown:
    spare_parts_total = order.spare_parts_total or ZERO
    service_fee = order.service_fee or ZERO
    base_cost = order.base_cost if order.base_cost is not None else spare_parts_total + service_fee
    tax_amount = order.tax_amount or ZERO
    grand_total = order.grand_total if order.grand_total is not None else base_cost + tax_amount
    return CostBreakdown(
        spare_parts_total=spare_parts_total,
        service_fee=service_fee,
        base_cost=base_cost,
        tax_rate=order.tax_rate or ZERO,
        tax_amount=tax_amount,
        grand_total=grand_total,
    )
