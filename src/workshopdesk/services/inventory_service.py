from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from psycopg import Connection

from ..errors import NotFoundError, ValidationError
from ..repositories.restock_repo import RestockRepository
from ..repositories.sparepart_repo import SparepartRepository

logger = logging.getLogger(__name__)


@dataclass
class SparepartInput:
    code: str
    name: str
    purchase_price: Decimal
    selling_price: Decimal
    stock: int
    minimum_stock: int = 0
    brand: str | None = None
    category: str | None = None
    supplier: str | None = None
    is_active: bool = True


class InventoryService:
    def __init__(self, *, sparepart_repo: SparepartRepository, restock_repo: RestockRepository) -> None:
        self.sparepart_repo = sparepart_repo
        self.restock_repo = restock_repo

    def save_sparepart(self, conn: Connection, *, tenant_id: int, data: SparepartInput) -> int:
        if not data.code.strip() or not data.name.strip():
            raise ValidationError("Sparepart code and name are required.")
        if data.purchase_price < 0 or data.selling_price < 0:
            raise ValidationError("Sparepart prices cannot be negative.")
        if data.stock < 0 or data.minimum_stock < 0:
            raise ValidationError("Stock figures cannot be negative.")

        return self.sparepart_repo.upsert_by_code(
            conn,
            tenant_id=tenant_id,
            code=data.code.strip(),
            name=data.name.strip(),
            purchase_price=data.purchase_price,
            selling_price=data.selling_price,
            stock=data.stock,
            minimum_stock=data.minimum_stock,
            brand=data.brand,
            category=data.category,
            supplier=data.supplier,
            is_active=data.is_active,
        )

    def restock(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        sparepart_id: int,
        quantity: int,
        purchase_price: Decimal | None = None,
        supplier: str | None = None,
        notes: str | None = None,
    ) -> int:
        """Add stock and keep a history row. Returns the new stock level."""
        if quantity <= 0:
            raise ValidationError("Restock quantity must be greater than 0.")
        if purchase_price is not None and purchase_price < 0:
            raise ValidationError("Purchase price cannot be negative.")

        sparepart = self.sparepart_repo.get(conn, tenant_id=tenant_id, sparepart_id=sparepart_id, for_update=True)
        if sparepart is None:
            raise NotFoundError(f"Sparepart #{sparepart_id} not found.")

        new_stock = sparepart.stock + quantity
        self.sparepart_repo.apply_restock(
            conn,
            tenant_id=tenant_id,
            sparepart_id=sparepart_id,
            new_stock=new_stock,
            purchase_price=(purchase_price if purchase_price is not None else sparepart.purchase_price),
            supplier=(supplier or sparepart.supplier),
        )
        self.restock_repo.create(
            conn,
            tenant_id=tenant_id,
            sparepart_id=sparepart_id,
            quantity=quantity,
            purchase_price=purchase_price,
            supplier=supplier,
            notes=notes,
            previous_stock=sparepart.stock,
            new_stock=new_stock,
        )
        logger.info("Restocked %s: %s -> %s", sparepart.code, sparepart.stock, new_stock)
        return new_stock

    def low_stock(self, conn: Connection, *, tenant_id: int) -> list[dict]:
        return self.sparepart_repo.list_low_stock(conn, tenant_id)
