from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from psycopg import Connection
from psycopg.rows import class_row

from ..costing import CostBreakdown
from ..domain import ServiceOrder

ORDER_COLUMNS = """
    id, tenant_id, service_number, customer_id, vehicle_id, complaint, technician,
    estimated_cost, status, progress, spare_parts_total, service_fee, base_cost,
    tax_rate, tax_amount, grand_total, payment_status, payment_date,
    created_at, updated_at, completed_at
"""


class OrderRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        service_number: str,
        customer_id: int,
        vehicle_id: int,
        complaint: str | None,
        technician: str | None,
        estimated_cost: Decimal | None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO service_order(tenant_id, service_number, customer_id, vehicle_id,
                                      complaint, technician, estimated_cost)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, service_number, customer_id, vehicle_id, complaint, technician, estimated_cost),
        )
        return int(cur.fetchone()[0])

    def get(
        self, conn: Connection, *, tenant_id: int, order_id: int, for_update: bool = False
    ) -> ServiceOrder | None:
        cur = conn.cursor(row_factory=class_row(ServiceOrder))
        cur.execute(
            f"""
            SELECT {ORDER_COLUMNS}
            FROM service_order
            WHERE tenant_id = %s AND id = %s
            {"FOR UPDATE" if for_update else ""};
            """,
            (tenant_id, order_id),
        )
        return cur.fetchone()

    def update_costs(self, conn: Connection, *, tenant_id: int, order_id: int, breakdown: CostBreakdown) -> None:
        conn.execute(
            """
            UPDATE service_order
            SET spare_parts_total = %(spare_parts_total)s,
                service_fee = %(service_fee)s,
                base_cost = %(base_cost)s,
                tax_rate = %(tax_rate)s,
                tax_amount = %(tax_amount)s,
                grand_total = %(grand_total)s,
                updated_at = now()
            WHERE tenant_id = %(tenant_id)s AND id = %(order_id)s;
            """,
            {**breakdown.as_record(), "tenant_id": tenant_id, "order_id": order_id},
        )

    def set_progress(self, conn: Connection, *, tenant_id: int, order_id: int, status: str, progress: int) -> None:
        conn.execute(
            """
            UPDATE service_order
            SET status = %s, progress = %s, updated_at = now()
            WHERE tenant_id = %s AND id = %s;
            """,
            (status, progress, tenant_id, order_id),
        )

    def complete(self, conn: Connection, *, tenant_id: int, order_id: int) -> None:
        conn.execute(
            """
            UPDATE service_order
            SET status = 'done', progress = 100, completed_at = now(), updated_at = now()
            WHERE tenant_id = %s AND id = %s;
            """,
            (tenant_id, order_id),
        )

    def set_payment_status(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        order_id: int,
        payment_status: str,
        payment_date: datetime | None,
    ) -> None:
        conn.execute(
            """
            UPDATE service_order
            SET payment_status = %s, payment_date = %s, updated_at = now()
            WHERE tenant_id = %s AND id = %s;
            """,
            (payment_status, payment_date, tenant_id, order_id),
        )

    def list(self, conn: Connection, tenant_id: int, limit: int = 30) -> list[dict]:
        cur = conn.execute(
            """
            SELECT o.id, o.service_number, o.status, o.progress, o.grand_total,
                   o.payment_status, c.full_name AS customer_name, v.license_plate, o.created_at
            FROM service_order o
            JOIN customer c ON c.id = o.customer_id
            JOIN vehicle v ON v.id = o.vehicle_id
            WHERE o.tenant_id = %s
            ORDER BY o.id DESC
            LIMIT %s;
            """,
            (tenant_id, limit),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
