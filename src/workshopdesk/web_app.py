from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from flask import Blueprint, Flask, current_app, jsonify, request

from . import numbering
from .config import AppConfig
from .db import Db
from .errors import DependencyError, NotFoundError, ValidationError
from .parsing import parse_decimal, parse_int, parse_optional_decimal, parse_optional_int
from .reports import daily_income, financial_report
from .services.inventory_service import SparepartInput
from .services.order_service import OrderPartInput
from .services.registry import Services, build_services

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__)

TENANT_HEADER = "X-Tenant-ID"


def _db() -> Db:
    return current_app.extensions["workshopdesk"]["db"]


def _services() -> Services:
    return current_app.extensions["workshopdesk"]["services"]


def _tenant_id() -> int:
    tenant_id = parse_optional_int(request.headers.get(TENANT_HEADER))
    if tenant_id is None:
        raise ValidationError(f"Missing or invalid {TENANT_HEADER} header.")
    return tenant_id


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _text(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def _date_arg(name: str, default: date) -> date:
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ValidationError(f"Invalid date for '{name}': {raw}") from e


# ---- customers ----

@api.get("/customers")
def customers_list():
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().repos.customer_repo.list(conn, tenant_id, limit=parse_int(request.args.get("limit"), 100))
    return jsonify(rows)


@api.post("/customers")
def customers_new():
    tenant_id = _tenant_id()
    data = _payload()
    full_name = _text(data, "full_name")
    if not full_name:
        raise ValidationError("Full name is required.")

    with _db().transaction() as conn:
        customer_id = _services().repos.customer_repo.create(
            conn,
            tenant_id=tenant_id,
            customer_code=numbering.customer_code(),
            full_name=full_name,
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            address=_text(data, "address"),
            notes=_text(data, "notes"),
        )
    return jsonify({"id": customer_id}), 201


@api.get("/customers/<int:customer_id>/vehicles")
def customers_vehicles(customer_id: int):
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().repos.vehicle_repo.list_by_customer(conn, tenant_id=tenant_id, customer_id=customer_id)
    return jsonify(rows)


# ---- spareparts ----

@api.get("/spareparts")
def spareparts_list():
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().repos.sparepart_repo.list(conn, tenant_id, limit=parse_int(request.args.get("limit"), 100))
    return jsonify(rows)


@api.post("/spareparts")
def spareparts_save():
    tenant_id = _tenant_id()
    data = _payload()
    item = SparepartInput(
        code=_text(data, "code") or "",
        name=_text(data, "name") or "",
        purchase_price=parse_decimal(data.get("purchase_price")),
        selling_price=parse_decimal(data.get("selling_price")),
        stock=parse_int(data.get("stock")),
        minimum_stock=parse_int(data.get("minimum_stock")),
        brand=_text(data, "brand"),
        category=_text(data, "category"),
        supplier=_text(data, "supplier"),
        is_active=bool(data.get("is_active", True)),
    )
    with _db().transaction() as conn:
        sparepart_id = _services().inventory.save_sparepart(conn, tenant_id=tenant_id, data=item)
    return jsonify({"id": sparepart_id}), 201


@api.post("/spareparts/<int:sparepart_id>/restock")
def spareparts_restock(sparepart_id: int):
    tenant_id = _tenant_id()
    data = _payload()
    with _db().transaction() as conn:
        new_stock = _services().inventory.restock(
            conn,
            tenant_id=tenant_id,
            sparepart_id=sparepart_id,
            quantity=parse_int(data.get("quantity")),
            purchase_price=parse_optional_decimal(data.get("purchase_price")),
            supplier=_text(data, "supplier"),
            notes=_text(data, "notes"),
        )
    return jsonify({"id": sparepart_id, "stock": new_stock})


@api.get("/spareparts/<int:sparepart_id>/restocks")
def spareparts_restocks(sparepart_id: int):
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().repos.restock_repo.list_for_sparepart(conn, tenant_id=tenant_id, sparepart_id=sparepart_id)
    return jsonify(rows)


@api.get("/spareparts/low-stock")
def spareparts_low_stock():
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().inventory.low_stock(conn, tenant_id=tenant_id)
    return jsonify(rows)


# ---- service orders ----

@api.get("/orders")
def orders_list():
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rows = _services().repos.order_repo.list(conn, tenant_id, limit=parse_int(request.args.get("limit"), 100))
    return jsonify(rows)


@api.post("/orders")
def orders_new():
    tenant_id = _tenant_id()
    data = _payload()
    with _db().transaction() as conn:
        order_id = _services().orders.create_order(
            conn,
            tenant_id=tenant_id,
            customer_id=parse_optional_int(data.get("customer_id")),
            customer_full_name=_text(data, "customer_full_name"),
            customer_email=_text(data, "customer_email"),
            customer_phone=_text(data, "customer_phone"),
            vehicle_id=parse_optional_int(data.get("vehicle_id")),
            vehicle_brand=_text(data, "vehicle_brand"),
            vehicle_model=_text(data, "vehicle_model"),
            vehicle_year=parse_optional_int(data.get("vehicle_year")),
            license_plate=_text(data, "license_plate"),
            complaint=_text(data, "complaint"),
            technician=_text(data, "technician"),
            estimated_cost=parse_optional_decimal(data.get("estimated_cost")),
        )
    return jsonify({"id": order_id}), 201


@api.put("/orders/<int:order_id>/detail")
def orders_save_detail(order_id: int):
    tenant_id = _tenant_id()
    data = _payload()
    parts = [
        OrderPartInput(
            sparepart_id=parse_int(p.get("sparepart_id")),
            quantity=parse_int(p.get("quantity")),
        )
        for p in data.get("spareparts") or []
        if isinstance(p, dict)
    ]
    with _db().transaction() as conn:
        services = _services()
        tax_rate = services.tenants.get_tax_rate(conn, tenant_id=tenant_id)
        breakdown = services.orders.save_order_detail(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            service_fee=parse_decimal(data.get("service_fee")),
            parts=parts,
            tax_rate=tax_rate,
        )
    return jsonify(breakdown)


@api.put("/orders/<int:order_id>/progress")
def orders_progress(order_id: int):
    tenant_id = _tenant_id()
    data = _payload()
    with _db().transaction() as conn:
        _services().orders.update_progress(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            status=str(data.get("status", "")),
            progress=parse_int(data.get("progress")),
        )
    return jsonify({"id": order_id})


@api.post("/orders/<int:order_id>/complete")
def orders_complete(order_id: int):
    tenant_id = _tenant_id()
    data = _payload()
    with _db().transaction() as conn:
        _services().orders.complete_order(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            decrease_stock=bool(data.get("decrease_stock", True)),
        )
    return jsonify({"id": order_id, "status": "done"})


@api.get("/orders/<int:order_id>/invoice")
def orders_invoice(order_id: int):
    tenant_id = _tenant_id()
    with _db().session() as conn:
        invoice = _services().orders.get_invoice(conn, tenant_id=tenant_id, order_id=order_id)
    return jsonify(invoice)


@api.get("/orders/<int:order_id>/payments")
def payments_list(order_id: int):
    tenant_id = _tenant_id()
    with _db().session() as conn:
        payments = _services().payments.list_payments(conn, tenant_id=tenant_id, order_id=order_id)
    return jsonify(payments)


@api.post("/orders/<int:order_id>/payments")
def payments_new(order_id: int):
    tenant_id = _tenant_id()
    data = _payload()
    with _db().transaction() as conn:
        receipt = _services().payments.record_payment(
            conn,
            tenant_id=tenant_id,
            order_id=order_id,
            amount=parse_decimal(data.get("amount")),
            method=str(data.get("method", "")),
            cash_received=parse_optional_decimal(data.get("cash_received")),
            notes=_text(data, "notes"),
        )
    return jsonify(receipt), 201


# ---- settings, costs, reports ----

@api.get("/settings/tax-rate")
def tax_rate_get():
    tenant_id = _tenant_id()
    with _db().session() as conn:
        rate = _services().tenants.get_tax_rate(conn, tenant_id=tenant_id)
    return jsonify({"tax_rate": rate})


@api.put("/settings/tax-rate")
def tax_rate_update():
    tenant_id = _tenant_id()
    rate = parse_optional_decimal(_payload().get("tax_rate"))
    if rate is None:
        raise ValidationError("tax_rate must be a number.")
    with _db().transaction() as conn:
        rate = _services().tenants.update_tax_rate(conn, tenant_id=tenant_id, rate=rate)
    return jsonify({"tax_rate": rate})


@api.get("/costs")
def costs_list():
    tenant_id = _tenant_id()
    today = date.today()
    date_from = _date_arg("from", today.replace(day=1))
    date_to = _date_arg("to", today)
    with _db().session() as conn:
        costs = _services().costs.list_costs(conn, tenant_id=tenant_id, date_from=date_from, date_to=date_to)
    return jsonify(costs)


@api.post("/costs")
def costs_new():
    tenant_id = _tenant_id()
    data = _payload()
    cost_date = None
    if data.get("cost_date"):
        try:
            cost_date = date.fromisoformat(str(data["cost_date"]))
        except ValueError as e:
            raise ValidationError(f"Invalid cost_date: {data['cost_date']}") from e
    with _db().transaction() as conn:
        cost_id = _services().costs.add_cost(
            conn,
            tenant_id=tenant_id,
            cost_name=_text(data, "cost_name") or "",
            amount=parse_decimal(data.get("amount")),
            cost_date=cost_date,
            notes=_text(data, "notes"),
        )
    return jsonify({"id": cost_id}), 201


@api.get("/reports/financial")
def reports_financial():
    tenant_id = _tenant_id()
    today = date.today()
    d1 = _date_arg("from", today - timedelta(days=30))
    d2 = _date_arg("to", today)
    if d2 < d1:
        raise ValidationError("'to' must not be before 'from'.")
    start = datetime.combine(d1, time.min)
    end = datetime.combine(d2 + timedelta(days=1), time.min)
    with _db().session() as conn:
        summary = financial_report(conn, tenant_id, start, end)
        days = daily_income(conn, tenant_id, start, end)
    return jsonify({"summary": summary, "daily": days})


# ---- errors ----

def _not_found(e: NotFoundError):
    return jsonify({"error": str(e)}), 404


def _invalid(e: ValidationError):
    return jsonify({"error": str(e)}), 400


def _dependency(e: DependencyError):
    logger.error("Data store failure: %s", e)
    return jsonify({"error": "The request could not be completed. Please try again."}), 503


def create_app(cfg: AppConfig | None = None, *, db: Db | None = None, services: Services | None = None) -> Flask:
    if db is None:
        if cfg is None:
            raise ValueError("create_app needs either a config or a Db")
        db = Db(cfg.db)
    if services is None:
        services = build_services(default_tax_rate=(cfg.business.default_tax_rate if cfg else Decimal("0")))

    app = Flask(__name__)
    app.extensions["workshopdesk"] = {"db": db, "services": services, "config": cfg}
    app.register_blueprint(api)
    app.register_error_handler(NotFoundError, _not_found)
    app.register_error_handler(ValidationError, _invalid)
    app.register_error_handler(DependencyError, _dependency)
    return app
