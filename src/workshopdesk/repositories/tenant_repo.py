from __future__ import annotations

from decimal import Decimal

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import Tenant


class TenantRepository:
    def create(
        self,
        conn: Connection,
        *,
        name: str,
        owner_name: str,
        email: str,
        phone: str | None,
        address: str | None,
        service_tax_rate: Decimal,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO tenant(name, owner_name, email, phone, address, service_tax_rate)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (name, owner_name, email, phone, address, service_tax_rate),
        )
        return int(cur.fetchone()[0])

    def get(self, conn: Connection, tenant_id: int) -> Tenant | None:
        cur = conn.cursor(row_factory=class_row(Tenant))
        cur.execute(
            """
            SELECT id, name, owner_name, email, phone, address, service_tax_rate, created_at
            FROM tenant WHERE id = %s;
            """,
            (tenant_id,),
        )
        return cur.fetchone()

    def update_tax_rate(self, conn: Connection, *, tenant_id: int, rate: Decimal) -> bool:
        cur = conn.execute(
            "UPDATE tenant SET service_tax_rate = %s WHERE id = %s;",
            (rate, tenant_id),
        )
        return cur.rowcount == 1
