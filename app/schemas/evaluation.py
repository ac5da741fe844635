"""Evaluation schemas for request/response validation."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.services.evaluation.results import (
    ControlStatus,
    EvidenceFreshness,
    RequirementStatus,
    RiskType,
)


class TenantRequest(BaseModel):
    """Body for tenant-scoped evaluation calls."""

    tenant_id: UUID


class EvaluateControlRequest(TenantRequest):
    control_id: UUID


class EvaluateObligationRequest(TenantRequest):
    obligation_id: UUID


class EvidenceEvaluationResponse(BaseModel):
    evidence_requirement_id: UUID
    evidence_name: str
    status: RequirementStatus
    freshness: EvidenceFreshness
    reason: str
    artifact_id: UUID | None = None
    uploaded_at: datetime | None = None
    expires_at: datetime | None = None
    days_until_expiry: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ControlEvaluationResponse(BaseModel):
    control_id: UUID
    control_code: str
    status: ControlStatus
    evidence_evaluations: list[EvidenceEvaluationResponse]
    pass_rate: int
    last_evaluated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ObligationEvaluationResponse(BaseModel):
    obligation_id: UUID
    obligation_code: str
    control_evaluations: list[ControlEvaluationResponse]
    overall_status: ControlStatus
    pass_rate: int

    model_config = ConfigDict(from_attributes=True)


class ReadinessScoreResponse(BaseModel):
    overall: int
    by_domain: dict[str, int]
    by_obligation: dict[str, int]
    total_obligations: int
    passing_obligations: int
    failing_obligations: int
    partial_obligations: int
    not_evaluated_obligations: int

    model_config = ConfigDict(from_attributes=True)


class RiskCandidateResponse(BaseModel):
    id: str
    obligation_code: str
    control_code: str | None
    risk_type: RiskType
    severity: str
    description: str
    detected_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RiskListResponse(BaseModel):
    risks: list[RiskCandidateResponse]
    count: int


class RiskItemRead(BaseModel):
    """Persisted risk item (auto-generated or manual)."""

    id: UUID
    tenant_id: UUID
    title: str
    description: str
    severity: str
    status: str
    obligation_id: UUID | None
    control_id: UUID | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RiskItemList(BaseModel):
    items: list[RiskItemRead]
    total: int


class FullEvaluationResponse(BaseModel):
    readiness_score: ReadinessScoreResponse
    risks: list[RiskCandidateResponse]
    evaluated_at: datetime
    duration_ms: int

    model_config = ConfigDict(from_attributes=True)


class JobRunRead(BaseModel):
    id: int
    job_type: str
    status: str
    tenant_id: UUID | None
    started_at: datetime
    finished_at: datetime | None
    duration_ms: int | None
    tenants_processed: int
    success_count: int
    error_count: int
    errors: list[dict] | None = None
    error_message: str | None = None

    model_config = ConfigDict(from_attributes=True)
