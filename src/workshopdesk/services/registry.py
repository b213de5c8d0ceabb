from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from ..repositories.cost_repo import CostRepository
from ..repositories.customer_repo import CustomerRepository
from ..repositories.line_item_repo import LineItemRepository
from ..repositories.order_repo import OrderRepository
from ..repositories.payment_repo import PaymentRepository
from ..repositories.restock_repo import RestockRepository
from ..repositories.sparepart_repo import SparepartRepository
from ..repositories.tenant_repo import TenantRepository
from ..repositories.vehicle_repo import VehicleRepository
from .cost_service import CostService
from .inventory_service import InventoryService
from .order_service import OrderService
from .payment_service import PaymentService
from .tenant_service import TenantService


@dataclass
class Repositories:
    tenant_repo: TenantRepository = field(default_factory=TenantRepository)
    customer_repo: CustomerRepository = field(default_factory=CustomerRepository)
    vehicle_repo: VehicleRepository = field(default_factory=VehicleRepository)
    sparepart_repo: SparepartRepository = field(default_factory=SparepartRepository)
    restock_repo: RestockRepository = field(default_factory=RestockRepository)
    order_repo: OrderRepository = field(default_factory=OrderRepository)
    line_item_repo: LineItemRepository = field(default_factory=LineItemRepository)
    payment_repo: PaymentRepository = field(default_factory=PaymentRepository)
    cost_repo: CostRepository = field(default_factory=CostRepository)


@dataclass
class Services:
    repos: Repositories
    orders: OrderService
    payments: PaymentService
    inventory: InventoryService
    tenants: TenantService
    costs: CostService


def build_services(repos: Repositories | None = None, *, default_tax_rate: Decimal = Decimal("0")) -> Services:
    repos = repos or Repositories()
    return Services(
        repos=repos,
        orders=OrderService(
            customer_repo=repos.customer_repo,
            vehicle_repo=repos.vehicle_repo,
            sparepart_repo=repos.sparepart_repo,
            order_repo=repos.order_repo,
            line_item_repo=repos.line_item_repo,
            payment_repo=repos.payment_repo,
        ),
        payments=PaymentService(order_repo=repos.order_repo, payment_repo=repos.payment_repo),
        inventory=InventoryService(sparepart_repo=repos.sparepart_repo, restock_repo=repos.restock_repo),
        tenants=TenantService(tenant_repo=repos.tenant_repo, default_tax_rate=default_tax_rate),
        costs=CostService(cost_repo=repos.cost_repo),
    )
