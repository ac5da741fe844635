"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

import logging
import secrets
from uuid import UUID

from fastapi import Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.session import get_db  # re-export
from app.services.evaluation.errors import TenantNotFoundError
from app.services.evaluation.tenant_directory import get_tenant

logger = logging.getLogger(__name__)

__all__ = [
    "get_db",
    "require_internal_token",
    "require_tenant",
]


def require_internal_token(x_internal_token: str = Header(...)) -> None:
    """Validate the internal service token from the X-Internal-Token header.

    Uses constant-time comparison to prevent timing attacks.
    Raises 403 if the token is empty or does not match the configured value.
    """
    expected = get_settings().internal_job_token
    if not expected or not secrets.compare_digest(x_internal_token, expected):
        logger.warning("Internal token auth failed: invalid or missing token")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid internal token")


def require_tenant(db: Session, tenant_id: UUID) -> UUID:
    """Return tenant_id if the tenant exists; raise 404 otherwise."""
    try:
        get_tenant(db, tenant_id)
    except TenantNotFoundError:
        raise HTTPException(status_code=404, detail="Tenant not found") from None
    return tenant_id
