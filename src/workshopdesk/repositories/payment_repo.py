from __future__ import annotations

from decimal import Decimal

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import PAYMENT_COMPLETED, Payment


class PaymentRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        order_id: int,
        payment_number: str,
        amount: Decimal,
        method: str,
        notes: str | None = None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO payment(tenant_id, order_id, payment_number, amount, method, status, notes)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, order_id, payment_number, amount, method, PAYMENT_COMPLETED, notes),
        )
        return int(cur.fetchone()[0])

    def total_for_order(self, conn: Connection, order_id: int) -> Decimal:
        cur = conn.execute(
            "SELECT COALESCE(SUM(amount), 0) FROM payment WHERE order_id = %s;",
            (order_id,),
        )
        return Decimal(cur.fetchone()[0])

    def list_for_order(self, conn: Connection, *, tenant_id: int, order_id: int) -> list[Payment]:
        cur = conn.cursor(row_factory=class_row(Payment))
        cur.execute(
            """
            SELECT id, tenant_id, order_id, payment_number, amount, method, status, notes, created_at
            FROM payment
            WHERE tenant_id = %s AND order_id = %s
            ORDER BY created_at DESC, id DESC;
            """,
            (tenant_id, order_id),
        )
        return cur.fetchall()
