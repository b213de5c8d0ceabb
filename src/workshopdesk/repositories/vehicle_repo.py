from __future__ import annotations

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import Vehicle


class VehicleRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        customer_id: int,
        brand: str,
        model: str | None,
        year: int | None,
        license_plate: str | None,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO vehicle(tenant_id, customer_id, brand, model, year, license_plate)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, customer_id, brand, model, year, license_plate),
        )
        return int(cur.fetchone()[0])

    def get(self, conn: Connection, *, tenant_id: int, vehicle_id: int) -> Vehicle | None:
        cur = conn.cursor(row_factory=class_row(Vehicle))
        cur.execute(
            """
            SELECT id, tenant_id, customer_id, brand, model, year, license_plate, created_at
            FROM vehicle
            WHERE tenant_id = %s AND id = %s;
            """,
            (tenant_id, vehicle_id),
        )
        return cur.fetchone()

    def list_by_customer(self, conn: Connection, *, tenant_id: int, customer_id: int) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, brand, model, year, license_plate, created_at
            FROM vehicle
            WHERE tenant_id = %s AND customer_id = %s
            ORDER BY id DESC;
            """,
            (tenant_id, customer_id),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
