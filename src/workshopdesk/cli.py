from __future__ import annotations

from datetime import datetime, timedelta

from .db import Db, DbError
from .domain import PAYMENT_METHODS
from .errors import NotFoundError, ValidationError
from .importers import ImportFileError, import_customers_csv, import_spareparts_json
from .parsing import parse_decimal, parse_int, parse_optional_decimal, parse_optional_int
from .reports import financial_report, top_spareparts
from .services.inventory_service import SparepartInput
from .services.order_service import OrderPartInput
from .services.registry import Services


def _prompt(msg: str) -> str:
    return input(msg).strip()


def _money(value) -> str:
    return f"{value:,.2f}"


def run_cli(db: Db, services: Services, tenant_id: int, currency: str = "IDR") -> None:
    repos = services.repos

    while True:
        print("\n=== WorkshopDesk CLI ===")
        print("1) List customers")
        print("2) List spareparts (stock)")
        print("3) Create service order")
        print("4) Save order detail (spareparts + service fee)")
        print("5) Record payment")
        print("6) Show invoice")
        print("7) List service orders")
        print("8) Restock sparepart")
        print("9) Add operating cost")
        print("10) Set tax rate")
        print("11) Import customers CSV")
        print("12) Import spareparts JSON")
        print("13) Financial report (last 30 days)")
        print("0) Exit")

        choice = _prompt("> ")
        try:
            if choice == "0":
                return

            elif choice == "1":
                with db.session() as conn:
                    rows = repos.customer_repo.list(conn, tenant_id, limit=50)
                for r in rows:
                    print(f'#{r["id"]} {r["customer_code"]} {r["full_name"]} phone={r["phone"]}')

            elif choice == "2":
                with db.session() as conn:
                    rows = repos.sparepart_repo.list(conn, tenant_id, limit=100)
                for r in rows:
                    flag = " LOW" if r["stock"] <= r["minimum_stock"] else ""
                    print(
                        f'#{r["id"]} {r["code"]} {r["name"]} price={_money(r["selling_price"])} '
                        f'stock={r["stock"]}{flag}'
                    )

            elif choice == "3":
                print("\nCustomer: A) existing customer_id  B) new customer")
                mode = _prompt("A/B: ").upper()
                customer_id = None
                full_name = email = phone = None
                if mode == "A":
                    customer_id = int(_prompt("customer_id: "))
                else:
                    full_name = _prompt("full_name: ")
                    email = _prompt("email (optional): ") or None
                    phone = _prompt("phone (optional): ") or None

                print("\nVehicle: A) existing vehicle_id  B) new vehicle")
                vmode = _prompt("A/B: ").upper()
                vehicle_id = None
                brand = model = plate = None
                year = None
                if vmode == "A":
                    vehicle_id = int(_prompt("vehicle_id: "))
                else:
                    brand = _prompt("brand (Honda/Yamaha/Suzuki/...): ")
                    model = _prompt("model (optional): ") or None
                    year = parse_optional_int(_prompt("year (optional): "))
                    plate = _prompt("license plate (optional): ") or None

                complaint = _prompt("complaint: ") or None
                technician = _prompt("technician (optional): ") or None
                estimated = parse_optional_decimal(_prompt("estimated cost (optional): "))

                with db.transaction() as conn:
                    order_id = services.orders.create_order(
                        conn,
                        tenant_id=tenant_id,
                        customer_id=customer_id,
                        customer_full_name=full_name,
                        customer_email=email,
                        customer_phone=phone,
                        vehicle_id=vehicle_id,
                        vehicle_brand=brand,
                        vehicle_model=model,
                        vehicle_year=year,
                        license_plate=plate,
                        complaint=complaint,
                        technician=technician,
                        estimated_cost=estimated,
                    )
                print(f"Created order_id={order_id}")

            elif choice == "4":
                order_id = int(_prompt("order_id: "))
                fee = parse_decimal(_prompt("service fee: "))
                parts: list[OrderPartInput] = []
                while True:
                    add = _prompt("Add sparepart? (y/n): ").lower()
                    if add != "y":
                        break
                    sparepart_id = int(_prompt("  sparepart_id: "))
                    qty = parse_int(_prompt("  quantity: "))
                    parts.append(OrderPartInput(sparepart_id=sparepart_id, quantity=qty))

                with db.transaction() as conn:
                    rate = services.tenants.get_tax_rate(conn, tenant_id=tenant_id)
                    b = services.orders.save_order_detail(
                        conn,
                        tenant_id=tenant_id,
                        order_id=order_id,
                        service_fee=fee,
                        parts=parts,
                        tax_rate=rate,
                    )
                print(
                    f"spareparts={_money(b.spare_parts_total)} fee={_money(b.service_fee)} "
                    f"subtotal={_money(b.base_cost)} tax({b.tax_rate}%)={_money(b.tax_amount)} "
                    f"total={_money(b.grand_total)} {currency}"
                )

            elif choice == "5":
                order_id = int(_prompt("order_id: "))
                amount = parse_decimal(_prompt("amount: "))
                method = _prompt(f"method {PAYMENT_METHODS}: ") or "cash"
                cash_received = None
                if method == "cash":
                    cash_received = parse_optional_decimal(_prompt("cash received: "))
                notes = _prompt("notes (optional): ") or None

                with db.transaction() as conn:
                    receipt = services.payments.record_payment(
                        conn,
                        tenant_id=tenant_id,
                        order_id=order_id,
                        amount=amount,
                        method=method,
                        cash_received=cash_received,
                        notes=notes,
                    )
                print(f"Payment {receipt.payment_number} recorded. status={receipt.status}")
                print(f"Remaining: {_money(receipt.remaining)} {currency}")
                if receipt.change_due > 0:
                    print(f"Change due: {_money(receipt.change_due)} {currency}")

            elif choice == "6":
                order_id = int(_prompt("order_id: "))
                with db.session() as conn:
                    inv = services.orders.get_invoice(conn, tenant_id=tenant_id, order_id=order_id)
                print(f"\nINVOICE {inv.order.service_number}  ({inv.order.payment_status})")
                for ln in inv.lines:
                    print(f'  {ln["code"]} {ln["name"]} {ln["quantity"]} x {_money(ln["unit_price"])} = {_money(ln["line_total"])}')
                b = inv.breakdown
                print(f"  Spareparts: {_money(b.spare_parts_total)}")
                print(f"  Service fee: {_money(b.service_fee)}")
                print(f"  Subtotal: {_money(b.base_cost)}")
                if b.tax_rate > 0:
                    print(f"  Tax ({b.tax_rate}%): {_money(b.tax_amount)}")
                print(f"  TOTAL: {_money(b.grand_total)} {currency}")
                print(f"  Paid: {_money(inv.total_paid)}  Remaining: {_money(inv.remaining)}")

            elif choice == "7":
                with db.session() as conn:
                    rows = repos.order_repo.list(conn, tenant_id, limit=30)
                for r in rows:
                    total = _money(r["grand_total"]) if r["grand_total"] is not None else "-"
                    print(
                        f'order#{r["id"]} {r["service_number"]} status={r["status"]} customer={r["customer_name"]} '
                        f'plate={r["license_plate"]} total={total} payment={r["payment_status"]}'
                    )

            elif choice == "8":
                sparepart_id = int(_prompt("sparepart_id: "))
                qty = parse_int(_prompt("quantity: "))
                price = parse_optional_decimal(_prompt("purchase price (optional): "))
                supplier = _prompt("supplier (optional): ") or None
                with db.transaction() as conn:
                    new_stock = services.inventory.restock(
                        conn,
                        tenant_id=tenant_id,
                        sparepart_id=sparepart_id,
                        quantity=qty,
                        purchase_price=price,
                        supplier=supplier,
                    )
                print(f"New stock: {new_stock}")

            elif choice == "9":
                name = _prompt("cost name: ")
                amount = parse_decimal(_prompt("amount: "))
                notes = _prompt("notes (optional): ") or None
                with db.transaction() as conn:
                    cost_id = services.costs.add_cost(
                        conn, tenant_id=tenant_id, cost_name=name, amount=amount, notes=notes
                    )
                print(f"Cost #{cost_id} recorded")

            elif choice == "10":
                rate = parse_decimal(_prompt("tax rate (%): "))
                with db.transaction() as conn:
                    services.tenants.update_tax_rate(conn, tenant_id=tenant_id, rate=rate)
                print(f"Tax rate set to {rate}%. Existing orders keep their stored totals.")

            elif choice == "11":
                path = _prompt("path to customers.csv: ")
                with db.transaction() as conn:
                    n = import_customers_csv(conn, path, tenant_id, repos.customer_repo)
                print(f"Imported customers: {n}")

            elif choice == "12":
                path = _prompt("path to spareparts.json: ")
                with db.transaction() as conn:
                    n = import_spareparts_json(conn, path, tenant_id, services.inventory)
                print(f"Imported/updated spareparts: {n}")

            elif choice == "13":
                with db.session() as conn:
                    d2 = datetime.now()
                    d1 = d2 - timedelta(days=30)
                    rep = financial_report(conn, tenant_id, d1, d2)
                    tops = top_spareparts(conn, tenant_id, limit=10)
                print(f"Income: {_money(rep.total_income)}  Parts: {_money(rep.parts_expense)}  "
                      f"Costs: {_money(rep.operating_costs)}  Net: {_money(rep.net_profit)}")
                print(f"Transactions: {rep.transaction_count}  Services: {rep.service_count}")
                print("Top spareparts:")
                for t in tops:
                    print(f'  {t["code"]} {t["name"]} qty={t["total_qty"]} value={_money(t["total_value"])}')

            else:
                print("Unknown choice.")

        except NotFoundError as e:
            print(f"[NOT FOUND] {e}")
        except ValidationError as e:
            print(f"[INPUT ERROR] {e}")
        except ImportFileError as e:
            print(f"[IMPORT ERROR] {e}")
        except DbError as e:
            print(f"[DB ERROR] {e}")
        except ValueError as e:
            print(f"[VALUE ERROR] {e}")
