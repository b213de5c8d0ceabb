from __future__ import annotations

from decimal import Decimal

import pytest

from fakes import CONN, FakeDb, fake_repositories
from workshopdesk.services.inventory_service import SparepartInput
from workshopdesk.services.order_service import OrderPartInput
from workshopdesk.services.registry import build_services


@pytest.fixture
def repos():
    return fake_repositories()


@pytest.fixture
def services(repos):
    return build_services(repos)


@pytest.fixture
def db():
    return FakeDb()


@pytest.fixture
def tenant_id(services):
    return services.tenants.create_tenant(
        CONN, name="Bengkel Jaya Motor", owner_name="Sari", email="owner@jayamotor.id", tax_rate=Decimal("10")
    )


@pytest.fixture
def oil_filter_id(services, tenant_id):
    return services.inventory.save_sparepart(
        CONN,
        tenant_id=tenant_id,
        data=SparepartInput(
            code="OF-001",
            name="Oil filter",
            purchase_price=Decimal("35000"),
            selling_price=Decimal("50000"),
            stock=5,
            minimum_stock=2,
        ),
    )


@pytest.fixture
def order_id(services, tenant_id):
    return services.orders.create_order(
        CONN,
        tenant_id=tenant_id,
        customer_id=None,
        customer_full_name="Budi Santoso",
        customer_email=None,
        customer_phone="0812000111",
        vehicle_id=None,
        vehicle_brand="Honda",
        vehicle_model="Vario 125",
        vehicle_year=2021,
        license_plate="b 1234 xyz",
        complaint="Engine rattles when cold",
        technician="Andi",
        estimated_cost=None,
    )


@pytest.fixture
def priced_order_id(services, tenant_id, order_id, oil_filter_id):
    """Order with 2 x 50000 spareparts, a 100000 fee and 10% tax: 220000 due."""
    services.orders.save_order_detail(
        CONN,
        tenant_id=tenant_id,
        order_id=order_id,
        service_fee=Decimal("100000"),
        parts=[OrderPartInput(sparepart_id=oil_filter_id, quantity=2)],
        tax_rate=services.tenants.get_tax_rate(CONN, tenant_id=tenant_id),
    )
    return order_id
