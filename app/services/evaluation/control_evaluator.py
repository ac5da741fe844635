"""Control evaluator: rolls requirement outcomes up into a control status."""

from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import UTC, datetime

from sqlalchemy.orm import Session, selectinload

from app.models import Control
from app.services.evaluation.errors import ControlNotFoundError, check_deadline
from app.services.evaluation.evaluation_constants import percentage
from app.services.evaluation.requirement_evaluator import evaluate_requirement
from app.services.evaluation.results import (
    ControlEvaluation,
    ControlStatus,
    RequirementStatus,
)

logger = logging.getLogger(__name__)


def get_tenant_control(db: Session, tenant_id: uuid.UUID, control_id: uuid.UUID) -> Control:
    """Load a control owned by tenant_id, with its requirements.

    Raises ControlNotFoundError when the id is unknown or belongs to another tenant.
    """
    control = (
        db.query(Control)
        .options(selectinload(Control.evidence_requirements))
        .filter(Control.id == control_id, Control.tenant_id == tenant_id)
        .first()
    )
    if control is None:
        raise ControlNotFoundError(f"Control {control_id} not found or access denied")
    return control


def control_status_from_counts(passed: int, warned: int, failed: int) -> ControlStatus:
    """Control rollup. FAIL dominates WARN; no requirements → NOT_EVALUATED."""
    total = passed + warned + failed
    if total == 0:
        return ControlStatus.NOT_EVALUATED
    if passed == total:
        return ControlStatus.PASS
    if failed > 0:
        return ControlStatus.FAIL
    return ControlStatus.PARTIAL


def evaluate_control(
    db: Session,
    tenant_id: uuid.UUID,
    control_id: uuid.UUID,
    now: datetime | None = None,
    deadline: float | None = None,
) -> ControlEvaluation:
    """Evaluate every evidence requirement of a tenant's control."""
    check_deadline(deadline, tenant_id)
    control = get_tenant_control(db, tenant_id, control_id)
    evaluated_at = now or datetime.now(UTC)

    evaluations = [
        evaluate_requirement(db, tenant_id, requirement, now=evaluated_at, deadline=deadline)
        for requirement in control.evidence_requirements
    ]
    counts = Counter(ev.status for ev in evaluations)
    passed = counts[RequirementStatus.PASS]
    status = control_status_from_counts(
        passed,
        counts[RequirementStatus.WARN],
        counts[RequirementStatus.FAIL],
    )

    logger.debug(
        "Control %s evaluated: status=%s pass=%d warn=%d fail=%d",
        control.code,
        status.value,
        passed,
        counts[RequirementStatus.WARN],
        counts[RequirementStatus.FAIL],
    )
    return ControlEvaluation(
        control_id=control.id,
        control_code=control.code or "",
        status=status,
        evidence_evaluations=evaluations,
        pass_rate=percentage(passed, len(evaluations)),
        last_evaluated_at=evaluated_at,
    )
