from __future__ import annotations

import logging
from decimal import Decimal

from psycopg import Connection

from ..errors import NotFoundError, ValidationError
from ..repositories.tenant_repo import TenantRepository

logger = logging.getLogger(__name__)


class TenantService:
    def __init__(self, *, tenant_repo: TenantRepository, default_tax_rate: Decimal = Decimal("0")) -> None:
        self.tenant_repo = tenant_repo
        self.default_tax_rate = default_tax_rate

    def create_tenant(
        self,
        conn: Connection,
        *,
        name: str,
        owner_name: str,
        email: str,
        phone: str | None = None,
        address: str | None = None,
        tax_rate: Decimal | None = None,
    ) -> int:
        if not (name.strip() and owner_name.strip() and email.strip()):
            raise ValidationError("Workshop name, owner name and email are required.")
        rate = self._checked_rate(self.default_tax_rate if tax_rate is None else tax_rate)
        tenant_id = self.tenant_repo.create(
            conn,
            name=name.strip(),
            owner_name=owner_name.strip(),
            email=email.strip(),
            phone=phone,
            address=address,
            service_tax_rate=rate,
        )
        logger.info("Created tenant #%s (%s)", tenant_id, name)
        return tenant_id

    def get_tax_rate(self, conn: Connection, *, tenant_id: int) -> Decimal:
        tenant = self.tenant_repo.get(conn, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant #{tenant_id} not found.")
        return tenant.service_tax_rate

    def update_tax_rate(self, conn: Connection, *, tenant_id: int, rate: Decimal) -> Decimal:
        """Change the rate used for future order detail saves.

        Orders already priced keep the rate stored on them.
        """
        rate = self._checked_rate(rate)
        if not self.tenant_repo.update_tax_rate(conn, tenant_id=tenant_id, rate=rate):
            raise NotFoundError(f"Tenant #{tenant_id} not found.")
        logger.info("Tenant #%s tax rate set to %s%%", tenant_id, rate)
        return rate

    @staticmethod
    def _checked_rate(rate: Decimal) -> Decimal:
        if rate < 0:
            raise ValidationError("Tax rate cannot be negative.")
        if rate > 100:
            # accepted as entered, never capped
            logger.warning("Tax rate above 100%% accepted: %s", rate)
        return rate
