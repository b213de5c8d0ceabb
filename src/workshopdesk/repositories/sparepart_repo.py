from __future__ import annotations

from decimal import Decimal

from psycopg import Connection
from psycopg.rows import class_row

from ..domain import Sparepart
from ..errors import ValidationError

SPAREPART_COLUMNS = """
    id, tenant_id, code, name, brand, category, purchase_price, selling_price,
    stock, minimum_stock, supplier, is_active, created_at
"""


class SparepartRepository:
    def upsert_by_code(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        code: str,
        name: str,
        purchase_price: Decimal,
        selling_price: Decimal,
        stock: int,
        minimum_stock: int = 0,
        brand: str | None = None,
        category: str | None = None,
        supplier: str | None = None,
        is_active: bool = True,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO sparepart(tenant_id, code, name, brand, category, purchase_price,
                                  selling_price, stock, minimum_stock, supplier, is_active)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (tenant_id, code) DO UPDATE SET
              name = EXCLUDED.name,
              brand = EXCLUDED.brand,
              category = EXCLUDED.category,
              purchase_price = EXCLUDED.purchase_price,
              selling_price = EXCLUDED.selling_price,
              stock = EXCLUDED.stock,
              minimum_stock = EXCLUDED.minimum_stock,
              supplier = EXCLUDED.supplier,
              is_active = EXCLUDED.is_active
            RETURNING id;
            """,
            (
                tenant_id,
                code,
                name,
                brand,
                category,
                purchase_price,
                selling_price,
                stock,
                minimum_stock,
                supplier,
                is_active,
            ),
        )
        return int(cur.fetchone()[0])

    def get(
        self, conn: Connection, *, tenant_id: int, sparepart_id: int, for_update: bool = False
    ) -> Sparepart | None:
        cur = conn.cursor(row_factory=class_row(Sparepart))
        cur.execute(
            f"""
            SELECT {SPAREPART_COLUMNS}
            FROM sparepart
            WHERE tenant_id = %s AND id = %s
            {"FOR UPDATE" if for_update else ""};
            """,
            (tenant_id, sparepart_id),
        )
        return cur.fetchone()

    def list(self, conn: Connection, tenant_id: int, limit: int = 50) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, code, name, brand, category, purchase_price, selling_price,
                   stock, minimum_stock, is_active
            FROM sparepart
            WHERE tenant_id = %s
            ORDER BY name
            LIMIT %s;
            """,
            (tenant_id, limit),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def list_low_stock(self, conn: Connection, tenant_id: int) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, code, name, stock, minimum_stock, supplier
            FROM sparepart
            WHERE tenant_id = %s AND is_active AND stock <= minimum_stock
            ORDER BY stock, name;
            """,
            (tenant_id,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def apply_restock(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        sparepart_id: int,
        new_stock: int,
        purchase_price: Decimal,
        supplier: str | None,
    ) -> None:
        conn.execute(
            """
            UPDATE sparepart
            SET stock = %s, purchase_price = %s, supplier = %s
            WHERE tenant_id = %s AND id = %s;
            """,
            (new_stock, purchase_price, supplier, tenant_id, sparepart_id),
        )

    def decrease_stock(self, conn: Connection, *, tenant_id: int, sparepart_id: int, qty: int) -> None:
        cur = conn.execute(
            """
            UPDATE sparepart
            SET stock = stock - %s
            WHERE tenant_id = %s AND id = %s AND stock >= %s;
            """,
            (qty, tenant_id, sparepart_id, qty),
        )
        if cur.rowcount != 1:
            raise ValidationError(f"Not enough stock for sparepart_id={sparepart_id}")
