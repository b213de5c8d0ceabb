from __future__ import annotations

import argparse
import logging
import os
import sys

from .cli import run_cli
from .config import AppConfig, ConfigError, load_config
from .db import Db, DbError
from .errors import ValidationError
from .parsing import parse_optional_decimal
from .services.registry import build_services

DEFAULT_CONFIG = "config.toml"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="workshopdesk", description="Motorcycle workshop management")
    parser.add_argument(
        "--config",
        default=os.environ.get("WORKSHOPDESK_CONFIG", DEFAULT_CONFIG),
        help="path to config.toml",
    )
    sub = parser.add_subparsers(dest="command")

    run = sub.add_parser("run", help="interactive console for one workshop")
    run.add_argument("--tenant", type=int, required=True, help="tenant (workshop) id")

    sub.add_parser("init-db", help="create the database tables")

    tenant = sub.add_parser("create-tenant", help="register a new workshop")
    tenant.add_argument("--name", required=True)
    tenant.add_argument("--owner", required=True)
    tenant.add_argument("--email", required=True)
    tenant.add_argument("--phone")
    tenant.add_argument("--tax-rate", help="service tax rate in percent")

    serve = sub.add_parser("serve", help="run the JSON API on the Flask dev server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    return parser


def dispatch(args: argparse.Namespace, cfg: AppConfig) -> int:
    db = Db(cfg.db)
    services = build_services(default_tax_rate=cfg.business.default_tax_rate)

    if args.command == "init-db":
        db.init_schema()
        print("Schema created.")
    elif args.command == "create-tenant":
        with db.transaction() as conn:
            tenant_id = services.tenants.create_tenant(
                conn,
                name=args.name,
                owner_name=args.owner,
                email=args.email,
                phone=args.phone,
                tax_rate=parse_optional_decimal(args.tax_rate),
            )
        print(f"Created tenant_id={tenant_id}")
    elif args.command == "serve":
        from .web_app import create_app

        create_app(cfg, db=db, services=services).run(host=args.host, port=args.port)
    else:
        run_cli(db, services, tenant_id=args.tenant, currency=cfg.business.currency)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    try:
        cfg = load_config(args.config)
        configure_logging(cfg.log_level)
        return dispatch(args, cfg)
    except ConfigError as e:
        print(f"[CONFIG ERROR] {e}", file=sys.stderr)
        return 2
    except DbError as e:
        print(f"[DB ERROR] {e}", file=sys.stderr)
        return 3
    except ValidationError as e:
        print(f"[INPUT ERROR] {e}", file=sys.stderr)
        return 4
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
