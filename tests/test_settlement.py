from __future__ import annotations

from decimal import Decimal

import pytest

from workshopdesk.errors import ValidationError
from workshopdesk.settlement import (
    change_due,
    derive_payment_status,
    plan_payment,
    remaining_balance,
    sum_payments,
)

TOTAL = Decimal("220000")


@pytest.mark.parametrize(
    "paid, expected",
    [
        (Decimal("0"), "unpaid"),
        (Decimal("1"), "partial"),
        (Decimal("219999.99"), "partial"),
        (Decimal("220000"), "paid"),
        (Decimal("250000"), "paid"),
    ],
)
def test_status_follows_total_paid(paid, expected):
    assert derive_payment_status(paid, TOTAL) == expected


def test_nothing_paid_on_zero_total_is_unpaid():
    assert derive_payment_status(Decimal("0"), Decimal("0")) == "unpaid"


def test_status_after_several_payments():
    amounts = [Decimal("50000"), Decimal("70000"), Decimal("100000")]
    statuses = []
    paid = []
    for a in amounts:
        paid.append(a)
        statuses.append(derive_payment_status(sum_payments(paid), TOTAL))
    assert statuses == ["partial", "partial", "paid"]


def test_remaining_is_clamped_at_zero():
    assert remaining_balance(TOTAL, Decimal("100000")) == Decimal("120000")
    assert remaining_balance(TOTAL, Decimal("300000")) == 0


def test_change_only_for_cash():
    assert change_due("cash", Decimal("100"), Decimal("150")) == Decimal("50")
    assert change_due("cash", Decimal("100"), Decimal("100")) == 0
    assert change_due("bank_transfer", Decimal("100"), Decimal("150")) == 0


def test_exact_cash_settlement_with_change():
    s = plan_payment(
        grand_total=TOTAL,
        paid_so_far=Decimal("0"),
        amount=Decimal("220000"),
        method="cash",
        cash_received=Decimal("250000"),
    )
    assert s.status == "paid"
    assert s.change_due == Decimal("30000")
    assert s.remaining == 0


def test_partial_cash_payment():
    s = plan_payment(
        grand_total=TOTAL,
        paid_so_far=Decimal("0"),
        amount=Decimal("100000"),
        method="cash",
        cash_received=Decimal("100000"),
    )
    assert s.status == "partial"
    assert s.change_due == 0
    assert s.remaining == Decimal("120000")


def test_paying_the_remaining_balance_settles_the_order():
    s = plan_payment(
        grand_total=TOTAL,
        paid_so_far=Decimal("100000"),
        amount=Decimal("120000"),
        method="e_wallet",
    )
    assert s.status == "paid"
    assert s.total_paid == TOTAL
    assert s.change_due == 0


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"amount": Decimal("300000"), "method": "bank_transfer"}, "exceeds outstanding balance"),
        ({"amount": Decimal("0"), "method": "bank_transfer"}, "greater than 0"),
        ({"amount": Decimal("-5"), "method": "bank_transfer"}, "greater than 0"),
        ({"amount": Decimal("1000"), "method": "cheque"}, "Unknown payment method"),
        ({"amount": Decimal("1000"), "method": "cash"}, "Insufficient cash"),
        ({"amount": Decimal("1000"), "method": "cash", "cash_received": Decimal("999")}, "Insufficient cash"),
    ],
)
def test_invalid_payments_are_rejected(kwargs, message):
    with pytest.raises(ValidationError, match=message):
        plan_payment(grand_total=TOTAL, paid_so_far=Decimal("0"), **kwargs)


def test_settled_order_refuses_more_payments():
    with pytest.raises(ValidationError, match="already paid"):
        plan_payment(grand_total=TOTAL, paid_so_far=TOTAL, amount=Decimal("1"), method="debit_card")
