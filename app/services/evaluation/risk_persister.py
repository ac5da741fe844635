"""Risk persister: tenant-scoped, idempotent replacement of auto-generated risk items."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.models import Control, Obligation, RiskItem
from app.models.enums import RiskStatus, Severity
from app.models.risk_item import RISK_TITLE_MAX_LENGTH
from app.services.evaluation.evaluation_constants import AUTO_RISK_TITLE_PREFIX
from app.services.evaluation.results import RiskCandidate

logger = logging.getLogger(__name__)

_TRUNCATION_MARK = "..."


def auto_risk_title(description: str) -> str:
    """Prefixed title, cut to fit RiskItem.title. The full text stays in the description."""
    title = f"{AUTO_RISK_TITLE_PREFIX} {description}"
    if len(title) <= RISK_TITLE_MAX_LENGTH:
        return title
    return title[: RISK_TITLE_MAX_LENGTH - len(_TRUNCATION_MARK)] + _TRUNCATION_MARK


def _resolve_ids(
    db: Session,
    model: type[Obligation] | type[Control],
    tenant_id: uuid.UUID,
    codes: set[str],
) -> dict[str, uuid.UUID]:
    """Map code → current id for the tenant's rows with those codes."""
    if not codes:
        return {}
    rows = (
        db.query(model.code, model.id)
        .filter(model.tenant_id == tenant_id, model.code.in_(codes))
        .order_by(model.code, model.id)
        .all()
    )
    resolved: dict[str, uuid.UUID] = {}
    for code, row_id in rows:
        resolved.setdefault(code, row_id)
    return resolved


def persist_risks(db: Session, tenant_id: uuid.UUID, risks: list[RiskCandidate]) -> int:
    """Replace the tenant's auto-generated risk items with risks.

    Deletes every RiskItem of the tenant whose title starts with
    AUTO_RISK_TITLE_PREFIX, then inserts one OPEN RiskItem per candidate, in a
    single transaction. Manually created risks (no prefix) are never touched.
    On any error the transaction is rolled back and the previous set stays visible.

    Returns the number of risk items inserted.
    """
    obligation_ids = _resolve_ids(
        db, Obligation, tenant_id, {r.obligation_code for r in risks if r.obligation_code}
    )
    control_ids = _resolve_ids(
        db, Control, tenant_id, {r.control_code for r in risks if r.control_code}
    )

    try:
        deleted = db.execute(
            delete(RiskItem)
            .where(
                RiskItem.tenant_id == tenant_id,
                RiskItem.title.startswith(AUTO_RISK_TITLE_PREFIX, autoescape=True),
            )
            .execution_options(synchronize_session=False)
        ).rowcount

        for risk in risks:
            db.add(
                RiskItem(
                    tenant_id=tenant_id,
                    title=auto_risk_title(risk.description),
                    description=(
                        f"Risk detected by automated evaluation: {risk.risk_type.value}"
                        f"\n\n{risk.description}"
                    ),
                    severity=risk.severity,
                    status=RiskStatus.OPEN.value,
                    obligation_id=obligation_ids.get(risk.obligation_code),
                    control_id=control_ids.get(risk.control_code) if risk.control_code else None,
                )
            )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Persisting risks failed for tenant %s; previous set kept", tenant_id)
        raise

    logger.info(
        "Persisted %d risk items for tenant %s (replaced %d)",
        len(risks),
        tenant_id,
        deleted or 0,
    )
    return len(risks)


def list_risk_items(db: Session, tenant_id: uuid.UUID) -> list[RiskItem]:
    """Tenant's risk items (auto and manual), most severe first, then newest."""
    items = (
        db.query(RiskItem)
        .filter(RiskItem.tenant_id == tenant_id)
        .order_by(RiskItem.created_at.desc(), RiskItem.id)
        .all()
    )
    rank = {
        Severity.CRITICAL.value: 0,
        Severity.HIGH.value: 1,
        Severity.MEDIUM.value: 2,
        Severity.LOW.value: 3,
    }
    return sorted(items, key=lambda item: rank.get(item.severity, len(rank)))
