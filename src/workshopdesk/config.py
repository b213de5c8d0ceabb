from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

# overrides db.password so the secret can stay out of config.toml
DB_PASSWORD_ENV = "WORKSHOPDESK_DB_PASSWORD"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DbConfig:
    host: str
    port: int
    name: str
    user: str
    password: str
    sslmode: str = "disable"


@dataclass(frozen=True)
class BusinessConfig:
    currency: str = "IDR"
    # percent, copied onto tenants created without an explicit rate
    default_tax_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class AppConfig:
    name: str
    log_level: str
    db: DbConfig
    business: BusinessConfig


def _db_section(section: dict[str, Any]) -> DbConfig:
    password = os.environ.get(DB_PASSWORD_ENV)
    if password is None:
        password = section["password"]
    return DbConfig(
        host=str(section["host"]),
        port=int(section.get("port", 5432)),
        name=str(section["name"]),
        user=str(section["user"]),
        password=str(password),
        sslmode=str(section.get("sslmode", "disable")),
    )


def _business_section(section: dict[str, Any]) -> BusinessConfig:
    rate = Decimal(str(section.get("default_tax_rate", "0")))
    if not rate.is_finite() or rate < 0:
        raise ValueError(f"business.default_tax_rate must be a non-negative number, got {rate}")
    return BusinessConfig(currency=str(section.get("currency", "IDR")), default_tax_rate=rate)


def load_config(path: str | Path) -> AppConfig:
    """Read config.toml. Only the [db] section is required."""
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Config file not found: {p.resolve()}")

    try:
        with p.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Failed to read config TOML: {e}") from e

    app = data.get("app", {})
    try:
        return AppConfig(
            name=str(app.get("name", "WorkshopDesk")),
            log_level=str(app.get("log_level", "INFO")).upper(),
            db=_db_section(data["db"]),
            business=_business_section(data.get("business", {})),
        )
    except KeyError as e:
        raise ConfigError(f"Missing config key: {e}") from e
    except (TypeError, ValueError, InvalidOperation) as e:
        raise ConfigError(f"Invalid config values: {e}") from e
