"""Evaluation result types.

These exist only for the duration of one evaluation call; they are returned
to API callers or reduced into RiskItem writes, never persisted as-is.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class RequirementStatus(str, Enum):
    """Outcome for a single evidence requirement."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"


class ControlStatus(str, Enum):
    """Rolled-up status for a control or an obligation."""

    PASS = "PASS"
    FAIL = "FAIL"
    PARTIAL = "PARTIAL"
    NOT_EVALUATED = "NOT_EVALUATED"


class EvidenceFreshness(str, Enum):
    """Temporal validity of evidence relative to its cadence."""

    FRESH = "FRESH"
    EXPIRING_SOON = "EXPIRING_SOON"
    STALE = "STALE"
    MISSING = "MISSING"
    PENDING_APPROVAL = "PENDING_APPROVAL"


class RiskType(str, Enum):
    MISSING_EVIDENCE = "MISSING_EVIDENCE"
    STALE_EVIDENCE = "STALE_EVIDENCE"
    FAILED_CONTROL = "FAILED_CONTROL"


@dataclass(frozen=True)
class FreshnessResult:
    freshness: EvidenceFreshness
    expires_at: datetime | None
    days_until_expiry: int | None


@dataclass
class EvidenceEvaluation:
    """Result of evaluating one evidence requirement."""

    evidence_requirement_id: uuid.UUID
    evidence_name: str
    status: RequirementStatus
    freshness: EvidenceFreshness
    reason: str
    artifact_id: uuid.UUID | None = None
    uploaded_at: datetime | None = None
    expires_at: datetime | None = None
    days_until_expiry: int | None = None


@dataclass
class ControlEvaluation:
    control_id: uuid.UUID
    control_code: str
    status: ControlStatus
    evidence_evaluations: list[EvidenceEvaluation]
    pass_rate: int
    last_evaluated_at: datetime


@dataclass
class ObligationEvaluation:
    obligation_id: uuid.UUID
    obligation_code: str
    control_evaluations: list[ControlEvaluation]
    overall_status: ControlStatus
    pass_rate: int


@dataclass
class ReadinessScore:
    """Tenant-level readiness. Advisory only; logged and returned, never stored."""

    overall: int
    by_domain: dict[str, int] = field(default_factory=dict)
    by_obligation: dict[str, int] = field(default_factory=dict)
    total_obligations: int = 0
    passing_obligations: int = 0
    failing_obligations: int = 0
    partial_obligations: int = 0
    not_evaluated_obligations: int = 0


@dataclass
class RiskCandidate:
    """A generated risk finding, before persistence."""

    id: str  # stable per-run key, e.g. "risk-missing-<requirement id>"
    obligation_code: str
    control_code: str | None
    risk_type: RiskType
    severity: str
    description: str
    detected_at: datetime


@dataclass
class FullEvaluationResult:
    readiness_score: ReadinessScore
    risks: list[RiskCandidate]
    evaluated_at: datetime
    duration_ms: int
