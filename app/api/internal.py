"""Internal job endpoints for cron/scripts.

These endpoints are secured with a static token (X-Internal-Token header),
NOT cookie-based auth.  They are meant for automated triggers only, for
deployments that schedule evaluations with an external cron instead of the
in-process scheduler.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_internal_token
from app.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/internal", include_in_schema=False)


def _batch_response(result: dict) -> dict:
    return {
        "status": result["status"],
        "job_run_id": result["job_run_id"],
        "tenants_processed": result["tenants_processed"],
        "success_count": result["success_count"],
        "error_count": result["error_count"],
        "duration_ms": result["duration_ms"],
        "error": result.get("error"),
    }


@router.post("/run_nightly_evaluation")
def run_nightly_evaluation_endpoint(
    db: Session = Depends(get_db),
    _token: None = Depends(require_internal_token),
):
    """Trigger the nightly full evaluation across all active tenants.

    Returns the JobRun summary. Per-tenant failures are counted, not raised.
    """
    from app.services.evaluation.evaluation_jobs import run_nightly_evaluation

    try:
        return _batch_response(run_nightly_evaluation(db))
    except Exception as exc:
        logger.exception("Internal nightly evaluation failed")
        return {"status": "failed", "error": str(exc)}


@router.post("/run_weekly_evaluation")
def run_weekly_evaluation_endpoint(
    db: Session = Depends(get_db),
    _token: None = Depends(require_internal_token),
):
    """Trigger the weekly deep evaluation across all active tenants."""
    from app.services.evaluation.evaluation_jobs import run_weekly_deep_evaluation

    try:
        return _batch_response(run_weekly_deep_evaluation(db))
    except Exception as exc:
        logger.exception("Internal weekly evaluation failed")
        return {"status": "failed", "error": str(exc)}
