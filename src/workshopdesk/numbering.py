from __future__ import annotations

import random
from datetime import datetime
from typing import Optional


def _stamp(prefix: str, date_format: str, digits: int, now: Optional[datetime]) -> str:
    now = now or datetime.now()
    suffix = str(random.randrange(10**digits)).zfill(digits)
    return f"{prefix}{now.strftime(date_format)}{suffix}"


def service_number(now: Optional[datetime] = None) -> str:
    # SRV + yymmdd + 3 digits
    return _stamp("SRV", "%y%m%d", 3, now)


def payment_number(now: Optional[datetime] = None) -> str:
    return _stamp("PAY", "%y%m%d", 3, now)


def customer_code(now: Optional[datetime] = None) -> str:
    return _stamp("CUST", "%y%m", 4, now)
