"""Full evaluation for one tenant: readiness score → risk generation → risk persistence."""

from __future__ import annotations

import logging
import time
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.services.evaluation.readiness_scorer import calculate_readiness_score
from app.services.evaluation.results import FullEvaluationResult
from app.services.evaluation.risk_generator import generate_risks
from app.services.evaluation.risk_persister import persist_risks

logger = logging.getLogger(__name__)


def run_full_evaluation(
    db: Session,
    tenant_id: uuid.UUID,
    now: datetime | None = None,
    timeout_seconds: float | None = None,
) -> FullEvaluationResult:
    """Run the full evaluation unit of work for a tenant.

    Used by scheduled batches and by the manual trigger. Errors propagate;
    the caller decides whether they are isolated (batch) or surfaced (manual).

    Args:
        db: Database session.
        tenant_id: Tenant to evaluate.
        now: Evaluation instant shared by every freshness check in the run.
        timeout_seconds: Optional bound; exceeding it raises EvaluationTimeoutError
            at the next storage lookup.
    """
    logger.info("Running full evaluation for tenant %s", tenant_id)
    started = time.monotonic()
    deadline = started + timeout_seconds if timeout_seconds and timeout_seconds > 0 else None
    now = now or datetime.now(UTC)

    readiness_score = calculate_readiness_score(db, tenant_id, now=now, deadline=deadline)
    risks = generate_risks(db, tenant_id, now=now, deadline=deadline)
    persist_risks(db, tenant_id, risks)

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Evaluation completed for tenant %s in %dms: score=%d%% risks=%d",
        tenant_id,
        duration_ms,
        readiness_score.overall,
        len(risks),
    )
    return FullEvaluationResult(
        readiness_score=readiness_score,
        risks=risks,
        evaluated_at=datetime.now(UTC),
        duration_ms=duration_ms,
    )
