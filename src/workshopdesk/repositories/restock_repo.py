from __future__ import annotations

from decimal import Decimal

from psycopg import Connection


class RestockRepository:
    def create(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        sparepart_id: int,
        quantity: int,
        purchase_price: Decimal | None,
        supplier: str | None,
        notes: str | None,
        previous_stock: int,
        new_stock: int,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO restock_history(tenant_id, sparepart_id, quantity, purchase_price,
                                        supplier, notes, previous_stock, new_stock)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (tenant_id, sparepart_id, quantity, purchase_price, supplier, notes, previous_stock, new_stock),
        )
        return int(cur.fetchone()[0])

    def list_for_sparepart(self, conn: Connection, *, tenant_id: int, sparepart_id: int) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, quantity, purchase_price, supplier, notes, previous_stock, new_stock, created_at
            FROM restock_history
            WHERE tenant_id = %s AND sparepart_id = %s
            ORDER BY created_at DESC;
            """,
            (tenant_id, sparepart_id),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
