"""Pydantic schemas for request/response validation."""

from app.schemas.evaluation import (
    ControlEvaluationResponse,
    EvaluateControlRequest,
    EvaluateObligationRequest,
    EvidenceEvaluationResponse,
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

__all__ = [
    "ControlEvaluationResponse",
    "EvaluateControlRequest",
    "EvaluateObligationRequest",
    "EvidenceEvaluationResponse",
    "FullEvaluationResponse",
    "JobRunRead",
    "ObligationEvaluationResponse",
    "ReadinessScoreResponse",
    "RiskCandidateResponse",
    "RiskItemList",
    "RiskItemRead",
    "RiskListResponse",
    "TenantRequest",
]
