"""Tenant directory lookups."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from app.models import Tenant
from app.services.evaluation.errors import TenantNotFoundError


def list_active_tenants(db: Session) -> list[Tenant]:
    """Active tenants ordered by name (stable batch order)."""
    return (
        db.query(Tenant)
        .filter(Tenant.is_active.is_(True))
        .order_by(Tenant.name, Tenant.id)
        .all()
    )


def get_tenant(db: Session, tenant_id: uuid.UUID) -> Tenant:
    """Return the tenant or raise TenantNotFoundError."""
    tenant = db.query(Tenant).filter(Tenant.id == tenant_id).first()
    if tenant is None:
        raise TenantNotFoundError(f"Tenant {tenant_id} not found")
    return tenant
