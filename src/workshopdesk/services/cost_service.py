from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from psycopg import Connection

from ..domain import OperatingCost
from ..errors import ValidationError
from ..repositories.cost_repo import CostRepository

logger = logging.getLogger(__name__)


class CostService:
    def __init__(self, *, cost_repo: CostRepository) -> None:
        self.cost_repo = cost_repo

    def add_cost(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        cost_name: str,
        amount: Decimal,
        cost_date: date | None = None,
        notes: str | None = None,
    ) -> int:
        if not cost_name.strip():
            raise ValidationError("Cost name cannot be empty.")
        if amount <= 0:
            raise ValidationError("Cost amount must be a positive number.")

        cost_id = self.cost_repo.create(
            conn,
            tenant_id=tenant_id,
            cost_name=cost_name.strip(),
            amount=amount,
            cost_date=cost_date or date.today(),
            notes=(notes.strip() or None) if notes else None,
        )
        logger.info("Recorded operating cost #%s: %s %s", cost_id, cost_name, amount)
        return cost_id

    def list_costs(self, conn: Connection, *, tenant_id: int, date_from: date, date_to: date) -> list[OperatingCost]:
        if date_to < date_from:
            raise ValidationError("date_to must not be before date_from.")
        return self.cost_repo.list(conn, tenant_id=tenant_id, date_from=date_from, date_to=date_to)
