from __future__ import annotations

from psycopg import Connection

from ..costing import CostLine


class LineItemRepository:
    def replace_for_order(self, conn: Connection, *, order_id: int, lines: list[tuple[int, CostLine]]) -> None:
        """Drop every line item of the order and insert `lines` (sparepart_id, line) in their place."""
        conn.execute("DELETE FROM order_line_item WHERE order_id = %s;", (order_id,))
        if not lines:
            return
        with conn.cursor() as cur:
            cur.executemany(
                """
                INSERT INTO order_line_item(order_id, sparepart_id, quantity, unit_price, line_total)
                VALUES (%s, %s, %s, %s, %s);
                """,
                [
                    (order_id, sparepart_id, line.quantity, line.unit_price, line.line_total)
                    for sparepart_id, line in lines
                ],
            )

    def list_for_order(self, conn: Connection, order_id: int) -> list[dict]:
        cur = conn.execute(
            """
            SELECT li.id, li.sparepart_id, sp.code, sp.name, li.quantity, li.unit_price, li.line_total
            FROM order_line_item li
            JOIN sparepart sp ON sp.id = li.sparepart_id
            WHERE li.order_id = %s
            ORDER BY li.id;
            """,
            (order_id,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
