from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from .domain import CASH, PAYMENT_METHODS, PaymentStatus
from .errors import ValidationError

ZERO = Decimal("0")


@dataclass(frozen=True)
class Settlement:
    status: PaymentStatus
    change_due: Decimal
    total_paid: Decimal
    remaining: Decimal


def sum_payments(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def derive_payment_status(total_paid: Decimal, grand_total: Decimal) -> PaymentStatus:
    if total_paid == 0:
        return "unpaid"
    if total_paid >= grand_total:
        return "paid"
    return "partial"


def remaining_balance(grand_total: Decimal, total_paid: Decimal) -> Decimal:
    return max(ZERO, grand_total - total_paid)


def change_due(method: str, amount: Decimal, cash_received: Optional[Decimal]) -> Decimal:
    if method != CASH or cash_received is None:
        return ZERO
    return max(ZERO, cash_received - amount)


def plan_payment(
    *,
    grand_total: Decimal,
    paid_so_far: Decimal,
    amount: Decimal,
    method: str,
    cash_received: Optional[Decimal] = None,
) -> Settlement:
    """Validate one proposed payment and work out where it leaves the order.

    Raises ValidationError for an unknown method, a non-positive amount, an
    order with nothing left to pay, an amount above the outstanding balance,
    or a cash payment without enough cash handed over.
    """
    if method not in PAYMENT_METHODS:
        raise ValidationError(f"Unknown payment method: {method}")
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than 0.")

    remaining = grand_total - paid_so_far
    if remaining <= 0:
        raise ValidationError("Order is already paid in full.")
    if amount > remaining:
        raise ValidationError(
            f"Payment exceeds outstanding balance: {amount} > {remaining}."
        )
    if method == CASH and (cash_received is None or cash_received < amount):
        raise ValidationError("Insufficient cash: cash received must be at least the payment amount.")

    total_paid = paid_so_far + amount
    return Settlement(
        status=derive_payment_status(total_paid, grand_total),
        change_due=change_due(method, amount, cash_received),
        total_paid=total_paid,
        remaining=remaining_balance(grand_total, total_paid),
    )
