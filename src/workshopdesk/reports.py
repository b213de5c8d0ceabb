from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from psycopg import Connection

from .domain import PAYMENT_COMPLETED

ZERO = Decimal("0")


@dataclass(frozen=True)
class FinancialSummary:
    total_income: Decimal
    parts_expense: Decimal
    operating_costs: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    margin_percent: Optional[Decimal]
    transaction_count: int
    service_count: int


def summarize_financials(
    *,
    total_income: Decimal,
    parts_expense: Decimal,
    operating_costs: Decimal,
    transaction_count: int,
    service_count: int,
) -> FinancialSummary:
    gross_profit = total_income - parts_expense
    net_profit = gross_profit - operating_costs
    margin = (net_profit / total_income * 100) if total_income else None
    return FinancialSummary(
        total_income=total_income,
        parts_expense=parts_expense,
        operating_costs=operating_costs,
        gross_profit=gross_profit,
        net_profit=net_profit,
        margin_percent=margin,
        transaction_count=transaction_count,
        service_count=service_count,
    )


def financial_report(conn: Connection, tenant_id: int, date_from: datetime, date_to: datetime) -> FinancialSummary:
    # income: payments taken in the window; parts expense: purchase cost of
    # spareparts used by orders opened in the window
    cur = conn.execute(
        """
        SELECT COALESCE(SUM(amount), 0), COUNT(*)
        FROM payment
        WHERE tenant_id = %s AND status = %s AND created_at >= %s AND created_at < %s;
        """,
        (tenant_id, PAYMENT_COMPLETED, date_from, date_to),
    )
    income, transaction_count = cur.fetchone()

    cur = conn.execute(
        """
        SELECT COALESCE(SUM(li.quantity * sp.purchase_price), 0), COUNT(DISTINCT o.id)
        FROM service_order o
        LEFT JOIN order_line_item li ON li.order_id = o.id
        LEFT JOIN sparepart sp ON sp.id = li.sparepart_id
        WHERE o.tenant_id = %s AND o.created_at >= %s AND o.created_at < %s;
        """,
        (tenant_id, date_from, date_to),
    )
    parts_expense, service_count = cur.fetchone()

    cur = conn.execute(
        """
        SELECT COALESCE(SUM(amount), 0)
        FROM operating_cost
        WHERE tenant_id = %s AND cost_date >= %s::date AND cost_date < %s::date;
        """,
        (tenant_id, date_from, date_to),
    )
    (operating_costs,) = cur.fetchone()

    return summarize_financials(
        total_income=Decimal(income),
        parts_expense=Decimal(parts_expense),
        operating_costs=Decimal(operating_costs),
        transaction_count=int(transaction_count),
        service_count=int(service_count),
    )


def daily_income(conn: Connection, tenant_id: int, date_from: datetime, date_to: datetime) -> list[dict]:
    cur = conn.execute(
        """
        SELECT created_at::date AS day, SUM(amount) AS income, COUNT(*) AS transactions
        FROM payment
        WHERE tenant_id = %s AND status = %s AND created_at >= %s AND created_at < %s
        GROUP BY created_at::date
        ORDER BY day;
        """,
        (tenant_id, PAYMENT_COMPLETED, date_from, date_to),
    )
    cols = [d.name for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def top_spareparts(conn: Connection, tenant_id: int, limit: int = 10) -> list[dict]:
    cur = conn.execute(
        """
        SELECT
          sp.code,
          sp.name,
          SUM(li.quantity) AS total_qty,
          SUM(li.line_total) AS total_value
        FROM order_line_item li
        JOIN sparepart sp ON sp.id = li.sparepart_id
        WHERE sp.tenant_id = %s
        GROUP BY sp.code, sp.name
        ORDER BY total_qty DESC
        LIMIT %s;
        """,
        (tenant_id, limit),
    )
    cols = [d.name for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]
