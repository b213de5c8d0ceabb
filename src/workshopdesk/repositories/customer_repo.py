from __future__ import annotations

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import Customer


class CustomerRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        customer_code: str,
        full_name: str,
        email: str | None,
        phone: str | None,
        address: str | None = None,
        notes: str | None = None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO customer(tenant_id, customer_code, full_name, email, phone, address, notes)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, customer_code, full_name, email, phone, address, notes),
        )
        return int(cur.fetchone()[0])

    def get(self, conn: Connection, *, tenant_id: int, customer_id: int) -> Customer | None:
        cur = conn.cursor(row_factory=class_row(Customer))
        cur.execute(
            """
            SELECT id, tenant_id, customer_code, full_name, email, phone, address, notes, created_at
            FROM customer
            WHERE tenant_id = %s AND id = %s;
            """,
            (tenant_id, customer_id),
        )
        return cur.fetchone()

    def list(self, conn: Connection, tenant_id: int, limit: int = 50) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, customer_code, full_name, email, phone, created_at
            FROM customer
            WHERE tenant_id = %s
            ORDER BY id DESC
            LIMIT %s;
            """,
            (tenant_id, limit),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
