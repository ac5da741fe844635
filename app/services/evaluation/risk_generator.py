"""Risk generator: typed risk findings from a fresh walk of the evaluation tree."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import Control, Obligation
from app.services.evaluation.control_evaluator import evaluate_control
from app.services.evaluation.errors import check_deadline
from app.services.evaluation.evaluation_constants import (
    DEFAULT_RISK_SEVERITY,
    RISK_SEVERITY_BY_OBLIGATION_SEVERITY,
)
from app.services.evaluation.readiness_scorer import list_tenant_obligations
from app.services.evaluation.results import (
    ControlEvaluation,
    ControlStatus,
    EvidenceFreshness,
    RiskCandidate,
    RiskType,
)

logger = logging.getLogger(__name__)


def risk_severity(obligation_severity: str | None) -> str:
    """Map obligation severity to risk severity; unmapped values → MEDIUM."""
    if obligation_severity is None:
        return DEFAULT_RISK_SEVERITY
    key = getattr(obligation_severity, "value", obligation_severity)
    return RISK_SEVERITY_BY_OBLIGATION_SEVERITY.get(key, DEFAULT_RISK_SEVERITY)


def _control_label(control: Control) -> str:
    return control.name or control.code


def risks_for_control(
    obligation: Obligation,
    control: Control,
    evaluation: ControlEvaluation,
    detected_at: datetime,
) -> list[RiskCandidate]:
    """Risk candidates for one control evaluated under one obligation."""
    severity = risk_severity(obligation.severity)
    label = _control_label(control)
    obligation_code = obligation.code or ""
    control_code = control.code or ""
    risks: list[RiskCandidate] = []

    for ev in evaluation.evidence_evaluations:
        if ev.freshness == EvidenceFreshness.MISSING:
            risks.append(
                RiskCandidate(
                    id=f"risk-missing-{ev.evidence_requirement_id}",
                    obligation_code=obligation_code,
                    control_code=control_code,
                    risk_type=RiskType.MISSING_EVIDENCE,
                    severity=severity,
                    description=f'Evidence "{ev.evidence_name}" has not been uploaded: {label}',
                    detected_at=detected_at,
                )
            )
        elif ev.freshness == EvidenceFreshness.STALE:
            risks.append(
                RiskCandidate(
                    id=f"risk-stale-{ev.evidence_requirement_id}",
                    obligation_code=obligation_code,
                    control_code=control_code,
                    risk_type=RiskType.STALE_EVIDENCE,
                    severity=severity,
                    description=(
                        f'Evidence "{ev.evidence_name}" expired '
                        f"{abs(ev.days_until_expiry or 0)} days ago: {label}"
                    ),
                    detected_at=detected_at,
                )
            )

    if evaluation.status == ControlStatus.FAIL:
        risks.append(
            RiskCandidate(
                id=f"risk-failed-{control.id}",
                obligation_code=obligation_code,
                control_code=control_code,
                risk_type=RiskType.FAILED_CONTROL,
                severity=severity,
                description=f"Control failed: {label}",
                detected_at=detected_at,
            )
        )
    return risks


def generate_risks(
    db: Session,
    tenant_id: uuid.UUID,
    now: datetime | None = None,
    deadline: float | None = None,
) -> list[RiskCandidate]:
    """Generate risk candidates for every obligation → control → requirement of the tenant.

    Evaluations are recomputed, never reused from a prior call, so the result
    always reflects current artifact-link state. Candidates are not
    deduplicated across runs; persist_risks replaces the previous set.
    """
    logger.info("Generating risks for tenant %s", tenant_id)
    now = now or datetime.now(UTC)
    risks: list[RiskCandidate] = []

    check_deadline(deadline, tenant_id)
    for obligation in list_tenant_obligations(db, tenant_id):
        for control in obligation.controls:
            evaluation = evaluate_control(db, tenant_id, control.id, now=now, deadline=deadline)
            risks.extend(risks_for_control(obligation, control, evaluation, now))

    logger.info("Generated %d risk items for tenant %s", len(risks), tenant_id)
    return risks
