from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional, get_args

OrderStatus = Literal["queued", "in_progress", "waiting_parts", "done"]
PaymentStatus = Literal["unpaid", "partial", "paid"]
PaymentMethod = Literal["cash", "bank_transfer", "e_wallet", "credit_card", "debit_card"]

ORDER_STATUSES: tuple[str, ...] = get_args(OrderStatus)
PAYMENT_METHODS: tuple[str, ...] = get_args(PaymentMethod)
CASH: PaymentMethod = "cash"
PAYMENT_COMPLETED = "completed"


@dataclass(frozen=True)
class Tenant:
    id: int
    name: str
    owner_name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    service_tax_rate: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Customer:
    id: int
    tenant_id: int
    customer_code: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Vehicle:
    id: int
    tenant_id: int
    customer_id: int
    brand: str
    model: Optional[str]
    year: Optional[int]
    license_plate: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Sparepart:
    id: int
    tenant_id: int
    code: str
    name: str
    brand: Optional[str]
    category: Optional[str]
    purchase_price: Decimal
    selling_price: Decimal
    stock: int
    minimum_stock: int
    supplier: Optional[str]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class RestockEntry:
    id: int
    tenant_id: int
    sparepart_id: int
    quantity: int
    purchase_price: Optional[Decimal]
    supplier: Optional[str]
    notes: Optional[str]
    previous_stock: int
    new_stock: int
    created_at: datetime


@dataclass(frozen=True)
class ServiceOrder:
    id: int
    tenant_id: int
    service_number: str
    customer_id: int
    vehicle_id: int
    complaint: Optional[str]
    technician: Optional[str]
    estimated_cost: Optional[Decimal]
    status: OrderStatus
    progress: int
    # cost snapshot; nullable on orders that never had their detail saved
    spare_parts_total: Optional[Decimal]
    service_fee: Optional[Decimal]
    base_cost: Optional[Decimal]
    tax_rate: Optional[Decimal]
    tax_amount: Optional[Decimal]
    grand_total: Optional[Decimal]
    payment_status: PaymentStatus
    payment_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]


@dataclass(frozen=True)
class OrderLineItem:
    id: int
    order_id: int
    sparepart_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Payment:
    id: int
    tenant_id: int
    order_id: int
    payment_number: str
    amount: Decimal
    method: PaymentMethod
    status: str
    notes: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class OperatingCost:
    id: int
    tenant_id: int
    cost_name: str
    amount: Decimal
    cost_date: date
    notes: Optional[str]
    created_at: datetime
