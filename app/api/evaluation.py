"""Evaluation API routes.

Synchronous surface for UI and other services. Every route is tenant-scoped;
ids that do not belong to the tenant return 404, never another tenant's data.
Secured with the internal service token (X-Internal-Token header).
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import require_internal_token, require_tenant
from app.db.session import get_db
from app.schemas.evaluation import (
    ControlEvaluationResponse,
    EvaluateControlRequest,
    EvaluateObligationRequest,
    FullEvaluationResponse,
    JobRunRead,
    ObligationEvaluationResponse,
    ReadinessScoreResponse,
    RiskCandidateResponse,
    RiskItemList,
    RiskItemRead,
    RiskListResponse,
    TenantRequest,
)
from app.services.evaluation import (
    EvaluationNotFoundError,
    calculate_readiness_score,
    evaluate_control,
    evaluate_obligation,
    generate_risks,
    get_job_history,
    list_risk_items,
    persist_risks,
    run_full_evaluation,
    trigger_manual_evaluation,
)

router = APIRouter(dependencies=[Depends(require_internal_token)])


def _risk_list(risks: list) -> RiskListResponse:
    return RiskListResponse(
        risks=[RiskCandidateResponse.model_validate(r) for r in risks],
        count=len(risks),
    )


@router.post("/control", response_model=ControlEvaluationResponse)
def api_evaluate_control(
    data: EvaluateControlRequest,
    db: Session = Depends(get_db),
) -> ControlEvaluationResponse:
    """Evaluate a single control's status."""
    try:
        result = evaluate_control(db, data.tenant_id, data.control_id)
    except EvaluationNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return ControlEvaluationResponse.model_validate(result)


@router.post("/obligation", response_model=ObligationEvaluationResponse)
def api_evaluate_obligation(
    data: EvaluateObligationRequest,
    db: Session = Depends(get_db),
) -> ObligationEvaluationResponse:
    """Evaluate an obligation's status from all its controls."""
    try:
        result = evaluate_obligation(db, data.tenant_id, data.obligation_id)
    except EvaluationNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return ObligationEvaluationResponse.model_validate(result)


@router.post("/readiness", response_model=ReadinessScoreResponse)
def api_calculate_readiness(
    data: TenantRequest,
    db: Session = Depends(get_db),
) -> ReadinessScoreResponse:
    """Calculate readiness score for a tenant."""
    tenant_id = require_tenant(db, data.tenant_id)
    return ReadinessScoreResponse.model_validate(calculate_readiness_score(db, tenant_id))


@router.post("/risks", response_model=RiskListResponse)
def api_generate_risks(
    data: TenantRequest,
    db: Session = Depends(get_db),
) -> RiskListResponse:
    """Generate risks for a tenant and replace its auto-generated risk items."""
    tenant_id = require_tenant(db, data.tenant_id)
    risks = generate_risks(db, tenant_id)
    persist_risks(db, tenant_id, risks)
    return _risk_list(risks)


@router.post("/run", response_model=FullEvaluationResponse)
def api_run_full_evaluation(
    data: TenantRequest,
    db: Session = Depends(get_db),
) -> FullEvaluationResponse:
    """Run full evaluation (score + risks) for a tenant."""
    tenant_id = require_tenant(db, data.tenant_id)
    return FullEvaluationResponse.model_validate(run_full_evaluation(db, tenant_id))


@router.get("/jobs/history", response_model=list[JobRunRead])
def api_job_history(
    db: Session = Depends(get_db),
    limit: int | None = Query(None, ge=1, le=100),
) -> list[JobRunRead]:
    """Recent evaluation job runs, newest first. Default size: JOB_HISTORY_LIMIT."""
    return [JobRunRead.model_validate(job) for job in get_job_history(db, limit=limit)]


@router.get("/{tenant_id}/readiness", response_model=ReadinessScoreResponse)
def api_get_readiness(
    tenant_id: UUID,
    db: Session = Depends(get_db),
) -> ReadinessScoreResponse:
    """Readiness score for a tenant (convenience GET)."""
    require_tenant(db, tenant_id)
    return ReadinessScoreResponse.model_validate(calculate_readiness_score(db, tenant_id))


@router.get("/{tenant_id}/risks", response_model=RiskListResponse)
def api_get_current_risks(
    tenant_id: UUID,
    db: Session = Depends(get_db),
) -> RiskListResponse:
    """Currently detected risks, computed on the fly. Does not touch stored risk items."""
    require_tenant(db, tenant_id)
    return _risk_list(generate_risks(db, tenant_id))


@router.get("/{tenant_id}/risk-items", response_model=RiskItemList)
def api_list_risk_items(
    tenant_id: UUID,
    db: Session = Depends(get_db),
) -> RiskItemList:
    """Stored risk items (auto-generated and manual), most severe first."""
    require_tenant(db, tenant_id)
    items = [RiskItemRead.model_validate(item) for item in list_risk_items(db, tenant_id)]
    return RiskItemList(items=items, total=len(items))


@router.post("/{tenant_id}/trigger", response_model=FullEvaluationResponse)
def api_trigger_evaluation(
    tenant_id: UUID,
    db: Session = Depends(get_db),
) -> FullEvaluationResponse:
    """Manually trigger a full evaluation; recorded in job history."""
    try:
        result = trigger_manual_evaluation(db, tenant_id)
    except EvaluationNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
    return FullEvaluationResponse.model_validate(result)
