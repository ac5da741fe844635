"""Obligation evaluator: rolls control statuses up into an obligation status."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session, selectinload

from app.models import Obligation
from app.services.evaluation.control_evaluator import evaluate_control
from app.services.evaluation.errors import ObligationNotFoundError, check_deadline
from app.services.evaluation.evaluation_constants import percentage
from app.services.evaluation.results import ControlStatus, ObligationEvaluation


def get_tenant_obligation(
    db: Session, tenant_id: uuid.UUID, obligation_id: uuid.UUID
) -> Obligation:
    """Load an obligation owned by tenant_id, with its linked controls.

    Raises ObligationNotFoundError when the id is unknown or belongs to another tenant.
    """
    obligation = (
        db.query(Obligation)
        .options(selectinload(Obligation.controls))
        .filter(Obligation.id == obligation_id, Obligation.tenant_id == tenant_id)
        .first()
    )
    if obligation is None:
        raise ObligationNotFoundError(f"Obligation {obligation_id} not found or access denied")
    return obligation


def obligation_status_from_counts(passing_controls: int, total_controls: int) -> ControlStatus:
    """All controls PASS → PASS; none PASS → FAIL; otherwise PARTIAL."""
    if total_controls == 0:
        return ControlStatus.NOT_EVALUATED
    if passing_controls == total_controls:
        return ControlStatus.PASS
    if passing_controls == 0:
        return ControlStatus.FAIL
    return ControlStatus.PARTIAL


def evaluate_obligation(
    db: Session,
    tenant_id: uuid.UUID,
    obligation_id: uuid.UUID,
    now: datetime | None = None,
    deadline: float | None = None,
) -> ObligationEvaluation:
    """Evaluate every control linked to a tenant's obligation."""
    check_deadline(deadline, tenant_id)
    obligation = get_tenant_obligation(db, tenant_id, obligation_id)
    now = now or datetime.now(UTC)

    control_evaluations = [
        evaluate_control(db, tenant_id, control.id, now=now, deadline=deadline)
        for control in obligation.controls
    ]
    passing = sum(1 for ev in control_evaluations if ev.status == ControlStatus.PASS)
    total = len(control_evaluations)

    return ObligationEvaluation(
        obligation_id=obligation.id,
        obligation_code=obligation.code or "",
        control_evaluations=control_evaluations,
        overall_status=obligation_status_from_counts(passing, total),
        pass_rate=percentage(passing, total),
    )
