"""In-memory stand-ins for the psycopg repositories.

Each fake exposes the same methods as the real repository and ignores the
connection argument.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import count

from workshopdesk.domain import (
    PAYMENT_COMPLETED,
    Customer,
    OperatingCost,
    Payment,
    ServiceOrder,
    Sparepart,
    Tenant,
    Vehicle,
)
from workshopdesk.errors import ValidationError
from workshopdesk.services.registry import Repositories

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)
CONN = object()


class FakeDb:
    def __init__(self) -> None:
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def session(self):
        yield object()

    @contextmanager
    def transaction(self):
        try:
            yield object()
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1


class FakeTenantRepo:
    def __init__(self) -> None:
        self.rows: dict[int, Tenant] = {}
        self._ids = count(1)

    def create(self, conn, *, name, owner_name, email, phone, address, service_tax_rate):
        tenant_id = next(self._ids)
        self.rows[tenant_id] = Tenant(
            id=tenant_id,
            name=name,
            owner_name=owner_name,
            email=email,
            phone=phone,
            address=address,
            service_tax_rate=service_tax_rate,
            created_at=NOW,
        )
        return tenant_id

    def get(self, conn, tenant_id):
        return self.rows.get(tenant_id)

    def update_tax_rate(self, conn, *, tenant_id, rate):
        if tenant_id not in self.rows:
            return False
        self.rows[tenant_id] = replace(self.rows[tenant_id], service_tax_rate=rate)
        return True


class FakeCustomerRepo:
    def __init__(self) -> None:
        self.rows: dict[int, Customer] = {}
        self._ids = count(1)

    def create(self, conn, *, tenant_id, customer_code, full_name, email, phone, address=None, notes=None):
        customer_id = next(self._ids)
        self.rows[customer_id] = Customer(
            id=customer_id,
            tenant_id=tenant_id,
            customer_code=customer_code,
            full_name=full_name,
            email=email,
            phone=phone,
            address=address,
            notes=notes,
            created_at=NOW,
        )
        return customer_id

    def get(self, conn, *, tenant_id, customer_id):
        c = self.rows.get(customer_id)
        return c if c and c.tenant_id == tenant_id else None

    def list(self, conn, tenant_id, limit=50):
        return [
            {"id": c.id, "customer_code": c.customer_code, "full_name": c.full_name, "phone": c.phone}
            for c in self.rows.values()
            if c.tenant_id == tenant_id
        ][:limit]


class FakeVehicleRepo:
    def __init__(self) -> None:
        self.rows: dict[int, Vehicle] = {}
        self._ids = count(1)

    def create(self, conn, *, tenant_id, customer_id, brand, model, year, license_plate):
        vehicle_id = next(self._ids)
        self.rows[vehicle_id] = Vehicle(
            id=vehicle_id,
            tenant_id=tenant_id,
            customer_id=customer_id,
            brand=brand,
            model=model,
            year=year,
            license_plate=license_plate,
            created_at=NOW,
        )
        return vehicle_id

    def get(self, conn, *, tenant_id, vehicle_id):
        v = self.rows.get(vehicle_id)
        return v if v and v.tenant_id == tenant_id else None

    def list_by_customer(self, conn, *, tenant_id, customer_id):
        return [
            {"id": v.id, "brand": v.brand, "model": v.model, "year": v.year, "license_plate": v.license_plate}
            for v in self.rows.values()
            if v.tenant_id == tenant_id and v.customer_id == customer_id
        ]


class FakeSparepartRepo:
    def __init__(self) -> None:
        self.rows: dict[int, Sparepart] = {}
        self._ids = count(1)

    def upsert_by_code(
        self,
        conn,
        *,
        tenant_id,
        code,
        name,
        purchase_price,
        selling_price,
        stock,
        minimum_stock=0,
        brand=None,
        category=None,
        supplier=None,
        is_active=True,
    ):
        existing = next((s for s in self.rows.values() if s.tenant_id == tenant_id and s.code == code), None)
        sparepart_id = existing.id if existing else next(self._ids)
        self.rows[sparepart_id] = Sparepart(
            id=sparepart_id,
            tenant_id=tenant_id,
            code=code,
            name=name,
            brand=brand,
            category=category,
            purchase_price=purchase_price,
            selling_price=selling_price,
            stock=stock,
            minimum_stock=minimum_stock,
            supplier=supplier,
            is_active=is_active,
            created_at=NOW,
        )
        return sparepart_id

    def get(self, conn, *, tenant_id, sparepart_id, for_update=False):
        s = self.rows.get(sparepart_id)
        return s if s and s.tenant_id == tenant_id else None

    def list(self, conn, tenant_id, limit=50):
        return [
            {"id": s.id, "code": s.code, "name": s.name, "selling_price": s.selling_price, "stock": s.stock}
            for s in self.rows.values()
            if s.tenant_id == tenant_id
        ][:limit]

    def list_low_stock(self, conn, tenant_id):
        return [
            {"id": s.id, "code": s.code, "name": s.name, "stock": s.stock, "minimum_stock": s.minimum_stock}
            for s in self.rows.values()
            if s.tenant_id == tenant_id and s.is_active and s.stock <= s.minimum_stock
        ]

    def apply_restock(self, conn, *, tenant_id, sparepart_id, new_stock, purchase_price, supplier):
        self.rows[sparepart_id] = replace(
            self.rows[sparepart_id], stock=new_stock, purchase_price=purchase_price, supplier=supplier
        )

    def decrease_stock(self, conn, *, tenant_id, sparepart_id, qty):
        s = self.rows[sparepart_id]
        if s.stock < qty:
            raise ValidationError(f"Not enough stock for sparepart_id={sparepart_id}")
        self.rows[sparepart_id] = replace(s, stock=s.stock - qty)


class FakeRestockRepo:
    def __init__(self) -> None:
        self.rows: list[dict] = []

    def create(self, conn, **fields):
        self.rows.append(dict(fields))
        return len(self.rows)

    def list_for_sparepart(self, conn, *, tenant_id, sparepart_id):
        return [
            dict(r) for r in reversed(self.rows) if r["tenant_id"] == tenant_id and r["sparepart_id"] == sparepart_id
        ]


class FakeOrderRepo:
    def __init__(self) -> None:
        self.rows: dict[int, ServiceOrder] = {}
        self._ids = count(1)

    def create(self, conn, *, tenant_id, service_number, customer_id, vehicle_id, complaint, technician, estimated_cost):
        order_id = next(self._ids)
        self.rows[order_id] = ServiceOrder(
            id=order_id,
            tenant_id=tenant_id,
            service_number=service_number,
            customer_id=customer_id,
            vehicle_id=vehicle_id,
            complaint=complaint,
            technician=technician,
            estimated_cost=estimated_cost,
            status="queued",
            progress=0,
            spare_parts_total=None,
            service_fee=None,
            base_cost=None,
            tax_rate=None,
            tax_amount=None,
            grand_total=None,
            payment_status="unpaid",
            payment_date=None,
            created_at=NOW,
            updated_at=NOW,
            completed_at=None,
        )
        return order_id

    def get(self, conn, *, tenant_id, order_id, for_update=False):
        o = self.rows.get(order_id)
        return o if o and o.tenant_id == tenant_id else None

    def update_costs(self, conn, *, tenant_id, order_id, breakdown):
        self.rows[order_id] = replace(self.rows[order_id], **breakdown.as_record())

    def set_progress(self, conn, *, tenant_id, order_id, status, progress):
        self.rows[order_id] = replace(self.rows[order_id], status=status, progress=progress)

    def complete(self, conn, *, tenant_id, order_id):
        self.rows[order_id] = replace(self.rows[order_id], status="done", progress=100, completed_at=NOW)

    def set_payment_status(self, conn, *, tenant_id, order_id, payment_status, payment_date):
        self.rows[order_id] = replace(
            self.rows[order_id], payment_status=payment_status, payment_date=payment_date
        )


class FakeLineItemRepo:
    def __init__(self, sparepart_repo: FakeSparepartRepo) -> None:
        self.sparepart_repo = sparepart_repo
        self.rows: dict[int, list[dict]] = {}
        self.replace_calls = 0

    def replace_for_order(self, conn, *, order_id, lines):
        self.replace_calls += 1
        self.rows[order_id] = [
            {
                "id": i,
                "sparepart_id": sparepart_id,
                "code": self.sparepart_repo.rows[sparepart_id].code,
                "name": self.sparepart_repo.rows[sparepart_id].name,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "line_total": line.line_total,
            }
            for i, (sparepart_id, line) in enumerate(lines, start=1)
        ]

    def list_for_order(self, conn, order_id):
        return list(self.rows.get(order_id, []))


class FakePaymentRepo:
    def __init__(self) -> None:
        self.rows: list[Payment] = []

    def create(self, conn, *, tenant_id, order_id, payment_number, amount, method, notes=None):
        payment = Payment(
            id=len(self.rows) + 1,
            tenant_id=tenant_id,
            order_id=order_id,
            payment_number=payment_number,
            amount=amount,
            method=method,
            status=PAYMENT_COMPLETED,
            notes=notes,
            created_at=NOW,
        )
        self.rows.append(payment)
        return payment.id

    def total_for_order(self, conn, order_id):
        return sum((p.amount for p in self.rows if p.order_id == order_id), Decimal("0"))

    def list_for_order(self, conn, *, tenant_id, order_id):
        return [p for p in reversed(self.rows) if p.order_id == order_id and p.tenant_id == tenant_id]


class FakeCostRepo:
    def __init__(self) -> None:
        self.rows: list[OperatingCost] = []

    def create(self, conn, *, tenant_id, cost_name, amount, cost_date, notes):
        cost = OperatingCost(
            id=len(self.rows) + 1,
            tenant_id=tenant_id,
            cost_name=cost_name,
            amount=amount,
            cost_date=cost_date,
            notes=notes,
            created_at=NOW,
        )
        self.rows.append(cost)
        return cost.id

    def list(self, conn, *, tenant_id, date_from: date, date_to: date):
        return [c for c in self.rows if c.tenant_id == tenant_id and date_from <= c.cost_date <= date_to]


def fake_repositories() -> Repositories:
    spareparts = FakeSparepartRepo()
    return Repositories(
        tenant_repo=FakeTenantRepo(),
        customer_repo=FakeCustomerRepo(),
        vehicle_repo=FakeVehicleRepo(),
        sparepart_repo=spareparts,
        restock_repo=FakeRestockRepo(),
        order_repo=FakeOrderRepo(),
        line_item_repo=FakeLineItemRepo(spareparts),
        payment_repo=FakePaymentRepo(),
        cost_repo=FakeCostRepo(),
    )
