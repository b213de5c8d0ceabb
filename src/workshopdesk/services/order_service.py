from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from psycopg import Connection

from .. import numbering
from ..costing import CostBreakdown, CostLine, aggregate_costs, stored_breakdown
from ..domain import ORDER_STATUSES, Payment, ServiceOrder
from ..errors import NotFoundError, ValidationError
from ..repositories.customer_repo import CustomerRepository
from ..repositories.line_item_repo import LineItemRepository
from ..repositories.order_repo import OrderRepository
from ..repositories.payment_repo import PaymentRepository
from ..repositories.sparepart_repo import SparepartRepository
from ..repositories.vehicle_repo import VehicleRepository
from ..settlement import derive_payment_status, remaining_balance, sum_payments

logger = logging.getLogger(__name__)


@dataclass
class OrderPartInput:
    sparepart_id: int
    quantity: int


@dataclass(frozen=True)
class Invoice:
    order: ServiceOrder
    lines: list[dict]
    breakdown: CostBreakdown
    payments: list[Payment]
    total_paid: Decimal
    remaining: Decimal


class OrderService:
    def __init__(
        self,
        *,
        customer_repo: CustomerRepository,
        vehicle_repo: VehicleRepository,
        sparepart_repo: SparepartRepository,
        order_repo: OrderRepository,
        line_item_repo: LineItemRepository,
        payment_repo: PaymentRepository,
    ) -> None:
        self.customer_repo = customer_repo
        self.vehicle_repo = vehicle_repo
        self.sparepart_repo = sparepart_repo
        self.order_repo = order_repo
        self.line_item_repo = line_item_repo
        self.payment_repo = payment_repo

    def _get_order(self, conn: Connection, tenant_id: int, order_id: int, for_update: bool = False) -> ServiceOrder:
        order = self.order_repo.get(conn, tenant_id=tenant_id, order_id=order_id, for_update=for_update)
        if order is None:
            raise NotFoundError(f"Service order #{order_id} not found.")
        return order

    def create_order(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        customer_id: int | None,
        customer_full_name: str | None,
        customer_email: str | None,
        customer_phone: str | None,
        vehicle_id: int | None,
        vehicle_brand: str | None,
        vehicle_model: str | None,
        vehicle_year: int | None,
        license_plate: str | None,
        complaint: str | None,
        technician: str | None,
        estimated_cost: Decimal | None,
    ) -> int:
        if customer_id is None and not (customer_full_name and customer_full_name.strip()):
            raise ValidationError("Either customer_id or customer_full_name must be provided.")
        if vehicle_id is None and not (vehicle_brand and vehicle_brand.strip()):
            raise ValidationError("Either vehicle_id or vehicle_brand must be provided.")
        if estimated_cost is not None and estimated_cost < 0:
            raise ValidationError("Estimated cost cannot be negative.")

        if customer_id is None:
            customer_id = self.customer_repo.create(
                conn,
                tenant_id=tenant_id,
                customer_code=numbering.customer_code(),
                full_name=customer_full_name.strip(),
                email=(customer_email.strip() if customer_email else None),
                phone=(customer_phone.strip() if customer_phone else None),
            )
        elif self.customer_repo.get(conn, tenant_id=tenant_id, customer_id=customer_id) is None:
            raise NotFoundError(f"Customer #{customer_id} not found.")

        if vehicle_id is None:
            vehicle_id = self.vehicle_repo.create(
                conn,
                tenant_id=tenant_id,
                customer_id=customer_id,
                brand=vehicle_brand.strip(),
                model=(vehicle_model.strip() if vehicle_model else None),
                year=vehicle_year,
                license_plate=(license_plate.strip().upper() if license_plate else None),
            )
        else:
            vehicle = self.vehicle_repo.get(conn, tenant_id=tenant_id, vehicle_id=vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle #{vehicle_id} not found.")
            if vehicle.customer_id != customer_id:
                raise ValidationError(f"Vehicle #{vehicle_id} does not belong to customer #{customer_id}.")

        order_id = self.order_repo.create(
            conn,
            tenant_id=tenant_id,
            service_number=numbering.service_number(),
            customer_id=customer_id,
            vehicle_id=vehicle_id,
            complaint=complaint,
            technician=technician,
            estimated_cost=estimated_cost,
        )
        logger.info("Created service order #%s for tenant %s", order_id, tenant_id)
        return order_id

    def save_order_detail(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        order_id: int,
        service_fee: Decimal | None,
        parts: list[OrderPartInput],
        tax_rate: Decimal | None,
    ) -> CostBreakdown:
        """Price the order and persist its cost snapshot and line items.

        Unit prices are copied from each sparepart's current selling price and
        `tax_rate` is the tenant's rate as read by the caller. The stored
        line items are replaced as a whole, and the payment status is derived
        again against the new total.
        """
        order = self._get_order(conn, tenant_id, order_id, for_update=True)

        lines: list[tuple[int, CostLine]] = []
        for p in parts:
            if p.quantity <= 0:
                raise ValidationError("Sparepart quantity must be > 0.")
            sparepart = self.sparepart_repo.get(conn, tenant_id=tenant_id, sparepart_id=p.sparepart_id)
            if sparepart is None:
                raise ValidationError(f"Unknown sparepart id: {p.sparepart_id}")
            if p.quantity > sparepart.stock:
                raise ValidationError(f"Only {sparepart.stock} unit(s) of {sparepart.name} left in stock.")
            lines.append((sparepart.id, CostLine(quantity=p.quantity, unit_price=sparepart.selling_price)))

        breakdown = aggregate_costs([line for _, line in lines], service_fee, tax_rate)

        self.order_repo.update_costs(conn, tenant_id=tenant_id, order_id=order_id, breakdown=breakdown)
        self.line_item_repo.replace_for_order(conn, order_id=order_id, lines=lines)

        paid = self.payment_repo.total_for_order(conn, order_id)
        status = derive_payment_status(paid, breakdown.grand_total)
        if status != order.payment_status:
            if status == "paid":
                payment_date = order.payment_date or datetime.now(timezone.utc)
            else:
                payment_date = None
            self.order_repo.set_payment_status(
                conn, tenant_id=tenant_id, order_id=order_id, payment_status=status, payment_date=payment_date
            )
        logger.info(
            "Saved detail of order #%s: %s line(s), grand total %s",
            order_id,
            len(lines),
            breakdown.grand_total,
        )
        return breakdown

    def update_progress(self, conn: Connection, *, tenant_id: int, order_id: int, status: str, progress: int) -> None:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown order status: {status}")
        if not 0 <= progress <= 100:
            raise ValidationError("Progress must be between 0 and 100.")
        self._get_order(conn, tenant_id, order_id)
        self.order_repo.set_progress(conn, tenant_id=tenant_id, order_id=order_id, status=status, progress=progress)

    def complete_order(
        self,
        conn: Connection,
        *,
        tenant_id: int,
        order_id: int,
        decrease_stock: bool = True,
    ) -> None:
        order = self._get_order(conn, tenant_id, order_id, for_update=True)
        if order.status == "done":
            raise ValidationError(f"Service order #{order_id} is already done.")

        self.order_repo.complete(conn, tenant_id=tenant_id, order_id=order_id)

        if decrease_stock:
            for ln in self.line_item_repo.list_for_order(conn, order_id):
                self.sparepart_repo.decrease_stock(
                    conn,
                    tenant_id=tenant_id,
                    sparepart_id=int(ln["sparepart_id"]),
                    qty=int(ln["quantity"]),
                )
        logger.info("Completed service order #%s (stock deducted: %s)", order_id, decrease_stock)

    def get_invoice(self, conn: Connection, *, tenant_id: int, order_id: int) -> Invoice:
        order = self._get_order(conn, tenant_id, order_id)
        breakdown = stored_breakdown(order)
        payments = self.payment_repo.list_for_order(conn, tenant_id=tenant_id, order_id=order_id)
        total_paid = sum_payments(p.amount for p in payments)
        return Invoice(
            order=order,
            lines=self.line_item_repo.list_for_order(conn, order_id),
            breakdown=breakdown,
            payments=payments,
            total_paid=total_paid,
            remaining=remaining_balance(breakdown.grand_total, total_paid),
        )
