"""Lenient number parsing for form and file input.

Blank, missing or garbage values fall back to a default instead of raising,
so records with null fees keep loading. Only the input edges (CLI, HTTP,
importers) call these; the costing core takes already-typed values.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

ZERO = Decimal("0")


def parse_optional_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return d if d.is_finite() else None


def parse_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    d = parse_optional_decimal(value)
    return default if d is None else d


def parse_optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def parse_int(value: Any, default: int = 0) -> int:
    n = parse_optional_int(value)
    return default if n is None else n
