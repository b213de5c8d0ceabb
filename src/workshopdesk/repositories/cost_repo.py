from __future__ import annotations

from datetime import date
from decimal import Decimal

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import OperatingCost


class CostRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        cost_name: str,
        amount: Decimal,
        cost_date: date,
        notes: str | None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO operating_cost(tenant_id, cost_name, amount, cost_date, notes)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, cost_name, amount, cost_date, notes),
        )
        return int(cur.fetchone()[0])

    def list(self, conn: Connection, *, tenant_id: int, date_from: date, date_to: date) -> list[OperatingCost]:
        cur = conn.cursor(row_factory=class_row(OperatingCost))
        cur.execute(
            """
            SELECT id, tenant_id, cost_name, amount, cost_date, notes, created_at
            FROM operating_cost
            WHERE tenant_id = %s AND cost_date BETWEEN %s AND %s
            ORDER BY cost_date DESC, id DESC;
            """,
            (tenant_id, date_from, date_to),
        )
        return cur.fetchall()
