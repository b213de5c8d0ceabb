from __future__ import annotations

from decimal import Decimal

import pytest

from fakes import CONN
from workshopdesk.errors import NotFoundError, ValidationError


def _pay(services, tenant_id, order_id, amount, method="cash", cash_received=None, notes=None):
    return services.payments.record_payment(
        CONN,
        tenant_id=tenant_id,
        order_id=order_id,
        amount=Decimal(amount),
        method=method,
        cash_received=(Decimal(cash_received) if cash_received is not None else None),
        notes=notes,
    )


def test_full_cash_payment_marks_order_paid(services, repos, tenant_id, priced_order_id):
    receipt = _pay(services, tenant_id, priced_order_id, "220000", cash_received="250000")

    assert receipt.status == "paid"
    assert receipt.change_due == Decimal("30000")
    assert receipt.remaining == 0
    assert receipt.payment_number.startswith("PAY")

    order = repos.order_repo.rows[priced_order_id]
    assert order.payment_status == "paid"
    assert order.payment_date is not None


def test_partial_payment_leaves_payment_date_unset(services, repos, tenant_id, priced_order_id):
    receipt = _pay(services, tenant_id, priced_order_id, "100000", cash_received="100000")

    assert receipt.status == "partial"
    assert receipt.change_due == 0
    assert receipt.remaining == Decimal("120000")
    order = repos.order_repo.rows[priced_order_id]
    assert order.payment_status == "partial"
    assert order.payment_date is None


def test_second_payment_completes_settlement(services, repos, tenant_id, priced_order_id):
    _pay(services, tenant_id, priced_order_id, "100000", cash_received="100000")
    receipt = _pay(services, tenant_id, priced_order_id, "120000", method="bank_transfer", notes=" BCA ")

    assert receipt.status == "paid"
    assert receipt.total_paid == Decimal("220000")
    assert repos.payment_repo.rows[-1].notes == "BCA"
    assert [p.amount for p in services.payments.list_payments(CONN, tenant_id=tenant_id, order_id=priced_order_id)] == [
        Decimal("120000"),
        Decimal("100000"),
    ]


def test_overpayment_writes_nothing(services, repos, tenant_id, priced_order_id):
    with pytest.raises(ValidationError, match="exceeds outstanding balance"):
        _pay(services, tenant_id, priced_order_id, "300000", method="credit_card")

    assert repos.payment_repo.rows == []
    assert repos.order_repo.rows[priced_order_id].payment_status == "unpaid"


def test_insufficient_cash_writes_nothing(services, repos, tenant_id, priced_order_id):
    with pytest.raises(ValidationError, match="Insufficient cash"):
        _pay(services, tenant_id, priced_order_id, "50000", cash_received="20000")
    assert repos.payment_repo.rows == []


def test_paid_order_accepts_no_further_payment(services, repos, tenant_id, priced_order_id):
    _pay(services, tenant_id, priced_order_id, "220000", method="e_wallet")

    with pytest.raises(ValidationError, match="already paid"):
        _pay(services, tenant_id, priced_order_id, "1000", method="e_wallet")
    assert len(repos.payment_repo.rows) == 1


def test_unknown_order(services, tenant_id):
    with pytest.raises(NotFoundError):
        _pay(services, tenant_id, 999, "1000", method="e_wallet")


def test_other_tenant_cannot_settle_order(services, priced_order_id):
    other = services.tenants.create_tenant(CONN, name="Other", owner_name="X", email="x@example.com")
    with pytest.raises(NotFoundError):
        _pay(services, other, priced_order_id, "1000", method="e_wallet")
