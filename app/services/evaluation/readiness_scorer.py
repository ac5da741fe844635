"""Readiness scorer: tenant-wide and per-domain readiness from obligation rollups.

PARTIAL obligations earn PARTIAL_CREDIT in both the per-domain and the
overall score. Both aggregations go through obligation_credit() and
percentage(), so the weight and the rounding point cannot drift apart.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.models import Obligation
from app.services.evaluation.errors import check_deadline
from app.services.evaluation.evaluation_constants import (
    PARTIAL_CREDIT,
    UNKNOWN_DOMAIN,
    percentage,
)
from app.services.evaluation.obligation_evaluator import evaluate_obligation
from app.services.evaluation.results import ControlStatus, ReadinessScore

logger = logging.getLogger(__name__)


def obligation_credit(status: ControlStatus) -> float:
    """PASS → 1, PARTIAL → PARTIAL_CREDIT, FAIL/NOT_EVALUATED → 0."""
    if status == ControlStatus.PASS:
        return 1.0
    if status == ControlStatus.PARTIAL:
        return PARTIAL_CREDIT
    return 0.0


def list_tenant_obligations(db: Session, tenant_id: uuid.UUID) -> list[Obligation]:
    """All obligations of a tenant in a stable order (code, id)."""
    return (
        db.query(Obligation)
        .filter(Obligation.tenant_id == tenant_id)
        .order_by(Obligation.code, Obligation.id)
        .all()
    )


def calculate_readiness_score(
    db: Session,
    tenant_id: uuid.UUID,
    now: datetime | None = None,
    deadline: float | None = None,
) -> ReadinessScore:
    """Evaluate every obligation of the tenant and aggregate into a ReadinessScore."""
    logger.info("Calculating readiness score for tenant %s", tenant_id)
    now = now or datetime.now(UTC)

    check_deadline(deadline, tenant_id)
    obligations = list_tenant_obligations(db, tenant_id)

    domain_credit: dict[str, float] = defaultdict(float)
    domain_total: dict[str, int] = defaultdict(int)
    by_obligation: dict[str, int] = {}
    status_counts: dict[ControlStatus, int] = defaultdict(int)
    overall_credit = 0.0

    for obligation in obligations:
        evaluation = evaluate_obligation(db, tenant_id, obligation.id, now=now, deadline=deadline)
        status = evaluation.overall_status
        credit = obligation_credit(status)

        by_obligation[obligation.code or ""] = evaluation.pass_rate
        domain = obligation.domain or UNKNOWN_DOMAIN
        domain_total[domain] += 1
        domain_credit[domain] += credit
        status_counts[status] += 1
        overall_credit += credit

    total = len(obligations)
    score = ReadinessScore(
        overall=percentage(overall_credit, total),
        by_domain={
            domain: percentage(domain_credit[domain], count)
            for domain, count in domain_total.items()
        },
        by_obligation=by_obligation,
        total_obligations=total,
        passing_obligations=status_counts[ControlStatus.PASS],
        failing_obligations=status_counts[ControlStatus.FAIL],
        partial_obligations=status_counts[ControlStatus.PARTIAL],
        not_evaluated_obligations=status_counts[ControlStatus.NOT_EVALUATED],
    )

    logger.info(
        "Readiness score for tenant %s: %d%% (%d/%d passing, %d partial)",
        tenant_id,
        score.overall,
        score.passing_obligations,
        total,
        score.partial_obligations,
    )
    return score
