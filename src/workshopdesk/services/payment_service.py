from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from psycopg import Connection

from .. import numbering
from ..costing import stored_breakdown
from ..domain import Payment, PaymentStatus
from ..errors import NotFoundError
from ..repositories.order_repo import OrderRepository
from ..repositories.payment_repo import PaymentRepository
from ..settlement import plan_payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentReceipt:
    payment_id: int
    payment_number: str
    status: PaymentStatus
    change_due: Decimal
    total_paid: Decimal
    remaining: Decimal


class PaymentService:
    def __init__(self, *, order_repo: OrderRepository, payment_repo: PaymentRepository) -> None:
        self.order_repo = order_repo
        self.payment_repo = payment_repo

    def record_payment(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        order_id: int,
        amount: Decimal,
        method: str,
        cash_received: Decimal | None = None,
        notes: str | None = None,
    ) -> PaymentReceipt:
        """Settle part or all of an order's balance.

        Must run inside a transaction: the order row is locked while the
        existing payments are summed, so concurrent settlements queue up.
        Nothing is written when validation fails.
        """
        order = self.order_repo.get(conn, tenant_id=tenant_id, order_id=order_id, for_update=True)
        if order is None:
            raise NotFoundError(f"Service order #{order_id} not found.")

        grand_total = stored_breakdown(order).grand_total
        paid_so_far = self.payment_repo.total_for_order(conn, order_id)
        settlement = plan_payment(
            grand_total=grand_total,
            paid_so_far=paid_so_far,
            amount=amount,
            method=method,
            cash_received=cash_received,
        )

        number = numbering.payment_number()
        payment_id = self.payment_repo.create(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            payment_number=number,
            amount=amount,
            method=method,
            notes=(notes.strip() if notes and notes.strip() else None),
        )
        self.order_repo.set_payment_status(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            payment_status=settlement.status,
            payment_date=(datetime.now(timezone.utc) if settlement.status == "paid" else None),
        )
        logger.info(
            "Recorded payment %s of %s (%s) on order #%s, status now %s",
            number,
            amount,
            method,
            order_id,
            settlement.status,
        )
        return PaymentReceipt(
            payment_id=payment_id,
            payment_number=number,
            status=settlement.status,
            change_due=settlement.change_due,
            total_paid=settlement.total_paid,
            remaining=settlement.remaining,
        )

    def list_payments(self, conn: Connection, *, tenant_id: int, order_id: int) -> list[Payment]:
        return self.payment_repo.list_for_order(conn, tenant_id=tenant_id, order_id=order_id)
