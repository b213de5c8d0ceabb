from __future__ import annotations

import csv
import json
import logging
from pathlib import Path

from psycopg import Connection

from . import numbering
from .parsing import parse_decimal, parse_int
from .repositories.customer_repo import CustomerRepository
from .services.inventory_service import InventoryService, SparepartInput

logger = logging.getLogger(__name__)


class ImportFileError(Exception):
    pass


def import_customers_csv(conn: Connection, path: str | Path, tenant_id: int, customer_repo: CustomerRepository) -> int:
    p = Path(path)
    if not p.exists():
        raise ImportFileError(f"File not found: {p}")

    count = 0
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        required = {"full_name", "email", "phone"}
        if not required.issubset(set(reader.fieldnames or [])):
            raise ImportFileError(f"CSV must contain columns: {sorted(required)}")

        for row in reader:
            full_name = (row.get("full_name") or "").strip()
            if not full_name:
                continue
            email = (row.get("email") or "").strip() or None
            phone = (row.get("phone") or "").strip() or None
            address = (row.get("address") or "").strip() or None

            customer_repo.create(
                conn,
                tenant_id=tenant_id,
                customer_code=numbering.customer_code(),
                full_name=full_name,
                email=email,
                phone=phone,
                address=address,
            )
            count += 1
    logger.info("Imported %s customer(s) from %s", count, p.name)
    return count


def import_spareparts_json(conn: Connection, path: str | Path, tenant_id: int, inventory: InventoryService) -> int:
    p = Path(path)
    if not p.exists():
        raise ImportFileError(f"File not found: {p}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ImportFileError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise ImportFileError("JSON must be a list of objects")

    count = 0
    for obj in data:
        if not isinstance(obj, dict):
            continue
        code = str(obj.get("code", "")).strip()
        name = str(obj.get("name", "")).strip()
        if not code or not name:
            continue

        inventory.save_sparepart(
            conn,
            tenant_id=tenant_id,
            data=SparepartInput(
                code=code,
                name=name,
                purchase_price=parse_decimal(obj.get("purchase_price")),
                selling_price=parse_decimal(obj.get("selling_price")),
                stock=parse_int(obj.get("stock")),
                minimum_stock=parse_int(obj.get("minimum_stock")),
                brand=obj.get("brand") or None,
                category=obj.get("category") or None,
                supplier=obj.get("supplier") or None,
                is_active=bool(obj.get("is_active", True)),
            ),
        )
        count += 1
    logger.info("Imported/updated %s sparepart(s) from %s", count, p.name)
    return count
