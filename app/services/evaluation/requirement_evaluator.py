"""Requirement evaluator: latest explicitly linked artifact → PASS/WARN/FAIL."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from sqlalchemy.orm import Session

from app.models import Artifact, ArtifactEvidenceRequirement, EvidenceRequirement
from app.services.evaluation.errors import check_deadline
from app.services.evaluation.evaluation_constants import DEFAULT_CADENCE_TYPE
from app.services.evaluation.freshness import as_utc, calculate_evidence_freshness
from app.services.evaluation.results import (
    EvidenceEvaluation,
    EvidenceFreshness,
    RequirementStatus,
)

logger = logging.getLogger(__name__)


def find_latest_linked_artifact(
    db: Session,
    tenant_id: uuid.UUID,
    requirement_id: uuid.UUID,
) -> Artifact | None:
    """Return the most recently uploaded, non-deleted tenant artifact linked to the requirement.

    Only the explicit artifact_evidence_requirements link is consulted; there is
    no fallback to unlinked artifacts or name matching.
    """
    return (
        db.query(Artifact)
        .join(
            ArtifactEvidenceRequirement,
            ArtifactEvidenceRequirement.artifact_id == Artifact.id,
        )
        .filter(
            ArtifactEvidenceRequirement.evidence_requirement_id == requirement_id,
            Artifact.tenant_id == tenant_id,
            Artifact.is_deleted.is_(False),
        )
        .order_by(Artifact.uploaded_at.desc(), Artifact.id.desc())
        .first()
    )


def evaluate_requirement(
    db: Session,
    tenant_id: uuid.UUID,
    requirement: EvidenceRequirement,
    now: datetime | None = None,
    deadline: float | None = None,
) -> EvidenceEvaluation:
    """Evaluate one evidence requirement for a tenant.

    - No linked artifact → FAIL / MISSING.
    - Mandatory requirement with unapproved artifact → WARN / PENDING_APPROVAL.
    - Otherwise by freshness: STALE → FAIL, EXPIRING_SOON → WARN, FRESH → PASS.
    """
    check_deadline(deadline, tenant_id)
    artifact = find_latest_linked_artifact(db, tenant_id, requirement.id)

    if artifact is None:
        return EvidenceEvaluation(
            evidence_requirement_id=requirement.id,
            evidence_name=requirement.name,
            status=RequirementStatus.FAIL,
            freshness=EvidenceFreshness.MISSING,
            reason=f'Missing evidence: no artifact linked to requirement "{requirement.name}"',
        )

    uploaded_at = as_utc(artifact.uploaded_at)

    if requirement.is_mandatory and not artifact.is_approved:
        return EvidenceEvaluation(
            evidence_requirement_id=requirement.id,
            evidence_name=requirement.name,
            status=RequirementStatus.WARN,
            freshness=EvidenceFreshness.PENDING_APPROVAL,
            reason=(
                f'Evidence not approved: "{artifact.name}" must be approved '
                f'for requirement "{requirement.name}"'
            ),
            artifact_id=artifact.id,
            uploaded_at=uploaded_at,
        )

    result = calculate_evidence_freshness(
        uploaded_at,
        requirement.cadence_type or DEFAULT_CADENCE_TYPE,
        requirement.cadence_review_months,
        now=now,
    )

    if result.freshness == EvidenceFreshness.STALE:
        status = RequirementStatus.FAIL
        reason = (
            f'Stale evidence: "{artifact.name}" expired '
            f"{abs(result.days_until_expiry or 0)} days ago"
        )
    elif result.freshness == EvidenceFreshness.EXPIRING_SOON:
        status = RequirementStatus.WARN
        reason = f'Evidence expiring: "{artifact.name}" expires in {result.days_until_expiry} days'
    else:
        status = RequirementStatus.PASS
        reason = f'Fresh evidence: "{artifact.name}" is up to date'

    return EvidenceEvaluation(
        evidence_requirement_id=requirement.id,
        evidence_name=requirement.name,
        status=status,
        freshness=result.freshness,
        reason=reason,
        artifact_id=artifact.id,
        uploaded_at=uploaded_at,
        expires_at=result.expires_at,
        days_until_expiry=result.days_until_expiry,
    )
