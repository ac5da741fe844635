"""Evaluation jobs: nightly/weekly batch over all tenants, manual trigger, job history.

One tenant failure does not stop a batch. Each failure is rolled back,
recorded with its tenant id and logged; the batch summary is written to a
JobRun row (append-only history) and logged.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models import JobRun
from app.services.evaluation.orchestrator import run_full_evaluation
from app.services.evaluation.results import FullEvaluationResult
from app.services.evaluation.tenant_directory import get_tenant, list_active_tenants

logger = logging.getLogger(__name__)

JOB_TYPE_NIGHTLY = "nightly_evaluation"
JOB_TYPE_WEEKLY_DEEP = "weekly_deep_evaluation"
JOB_TYPE_MANUAL = "manual_evaluation"


def _timeout_seconds(timeout_seconds: float | None) -> float | None:
    if timeout_seconds is not None:
        return timeout_seconds
    configured = get_settings().tenant_evaluation_timeout_seconds
    return configured if configured > 0 else None


def _log_job_summary(job: JobRun) -> None:
    """Log the job summary; error details go to a separate WARNING line."""
    logger.info(
        "Job summary: %s",
        json.dumps(
            {
                "job_run_id": job.id,
                "job_type": job.job_type,
                "status": job.status,
                "duration_ms": job.duration_ms,
                "tenants_processed": job.tenants_processed,
                "success_count": job.success_count,
                "error_count": job.error_count,
            }
        ),
    )
    if job.errors:
        logger.warning("Errors during %s: %s", job.job_type, json.dumps(job.errors))


def _summary(job: JobRun) -> dict:
    return {
        "status": job.status,
        "job_run_id": job.id,
        "job_type": job.job_type,
        "tenants_processed": job.tenants_processed,
        "success_count": job.success_count,
        "error_count": job.error_count,
        "errors": list(job.errors or []),
        "duration_ms": job.duration_ms,
        "error": job.error_message,
    }


def run_evaluation_batch(
    db: Session,
    job_type: str = JOB_TYPE_NIGHTLY,
    now: datetime | None = None,
    timeout_seconds: float | None = None,
) -> dict:
    """Run a full evaluation for every active tenant, sequentially.

    Each tenant is bounded by timeout_seconds (default:
    TENANT_EVALUATION_TIMEOUT_SECONDS); a timeout is recorded like any other
    failure. Creates a JobRun record for audit.

    Returns:
        dict with status, job_run_id, job_type, tenants_processed, success_count,
        error_count, errors ([{tenant_id, error}]), duration_ms, error.
    """
    started = time.monotonic()
    job = JobRun(job_type=job_type, status="running")
    db.add(job)
    db.commit()
    db.refresh(job)

    logger.info("Starting %s job (job_run_id=%s)", job_type, job.id)
    per_tenant_timeout = _timeout_seconds(timeout_seconds)

    try:
        tenants = [(tenant.id, tenant.name) for tenant in list_active_tenants(db)]
        logger.info("Found %d tenants to evaluate", len(tenants))

        success_count = 0
        errors: list[dict[str, str]] = []

        for tenant_id, tenant_name in tenants:
            try:
                logger.info("Evaluating tenant %s (%s)", tenant_id, tenant_name)
                result = run_full_evaluation(
                    db, tenant_id, now=now, timeout_seconds=per_tenant_timeout
                )
                logger.info(
                    "Tenant %s evaluation complete: score %d%%, %d risks detected",
                    tenant_id,
                    result.readiness_score.overall,
                    len(result.risks),
                )
                success_count += 1
            except Exception as exc:
                db.rollback()
                logger.exception("Evaluation failed for tenant %s", tenant_id)
                errors.append({"tenant_id": str(tenant_id), "error": str(exc)})

        duration_ms = int((time.monotonic() - started) * 1000)
        job.finished_at = datetime.now(UTC)
        job.status = "completed"
        job.duration_ms = duration_ms
        job.tenants_processed = len(tenants)
        job.success_count = success_count
        job.error_count = len(errors)
        job.errors = errors
        job.error_message = "; ".join(e["error"] for e in errors[:10]) if errors else None
        db.commit()

        logger.info(
            "%s job complete: %d successful, %d errors, %dms total",
            job_type,
            success_count,
            len(errors),
            duration_ms,
        )
        _log_job_summary(job)
        return _summary(job)

    except Exception as exc:
        logger.exception("%s job failed", job_type)
        db.rollback()
        job.finished_at = datetime.now(UTC)
        job.status = "failed"
        job.duration_ms = int((time.monotonic() - started) * 1000)
        job.error_message = str(exc)
        db.commit()
        return _summary(job)


def run_nightly_evaluation(db: Session, now: datetime | None = None) -> dict:
    """Nightly full pass over all tenants."""
    return run_evaluation_batch(db, JOB_TYPE_NIGHTLY, now=now)


def run_weekly_deep_evaluation(db: Session, now: datetime | None = None) -> dict:
    """Weekly deep pass. Currently the same work as the nightly pass."""
    return run_evaluation_batch(db, JOB_TYPE_WEEKLY_DEEP, now=now)


def trigger_manual_evaluation(
    db: Session,
    tenant_id: uuid.UUID,
    now: datetime | None = None,
) -> FullEvaluationResult:
    """Run a full evaluation for one tenant on demand.

    Records a JobRun shaped like a scheduled batch summary (one tenant).
    Unlike batch runs, errors propagate to the caller after being recorded.
    Raises TenantNotFoundError for unknown tenants.
    """
    logger.info("Triggering manual evaluation for tenant %s", tenant_id)
    get_tenant(db, tenant_id)
    started_at = datetime.now(UTC)
    started = time.monotonic()

    try:
        result = run_full_evaluation(
            db, tenant_id, now=now, timeout_seconds=_timeout_seconds(None)
        )
    except Exception as exc:
        db.rollback()
        logger.exception("Manual evaluation failed for tenant %s", tenant_id)
        job = JobRun(
            job_type=JOB_TYPE_MANUAL,
            tenant_id=tenant_id,
            status="failed",
            started_at=started_at,
            finished_at=datetime.now(UTC),
            duration_ms=int((time.monotonic() - started) * 1000),
            tenants_processed=1,
            success_count=0,
            error_count=1,
            errors=[{"tenant_id": str(tenant_id), "error": str(exc)}],
            error_message=str(exc),
        )
        db.add(job)
        db.commit()
        _log_job_summary(job)
        raise

    job = JobRun(
        job_type=JOB_TYPE_MANUAL,
        tenant_id=tenant_id,
        status="completed",
        started_at=started_at,
        finished_at=datetime.now(UTC),
        duration_ms=result.duration_ms,
        tenants_processed=1,
        success_count=1,
        error_count=0,
        errors=[],
    )
    db.add(job)
    db.commit()
    _log_job_summary(job)
    return result


def get_job_history(db: Session, limit: int | None = None) -> list[JobRun]:
    """Most recent evaluation job runs, newest first."""
    if limit is None:
        limit = get_settings().job_history_limit
    return (
        db.query(JobRun)
        .order_by(JobRun.started_at.desc(), JobRun.id.desc())
        .limit(max(1, limit))
        .all()
    )
