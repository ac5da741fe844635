"""Evaluation & readiness scoring engine.

requirement → control → obligation → tenant rollups, risk generation and
persistence, and the scheduled jobs that run them for every tenant.
"""

from app.services.evaluation.control_evaluator import evaluate_control
from app.services.evaluation.errors import (
    ControlNotFoundError,
    EvaluationNotFoundError,
    EvaluationTimeoutError,
    ObligationNotFoundError,
    TenantNotFoundError,
)
from app.services.evaluation.evaluation_jobs import (
    get_job_history,
    run_evaluation_batch,
    run_nightly_evaluation,
    run_weekly_deep_evaluation,
    trigger_manual_evaluation,
)
from app.services.evaluation.freshness import calculate_evidence_freshness
from app.services.evaluation.obligation_evaluator import evaluate_obligation
from app.services.evaluation.orchestrator import run_full_evaluation
from app.services.evaluation.readiness_scorer import calculate_readiness_score
from app.services.evaluation.requirement_evaluator import evaluate_requirement
from app.services.evaluation.risk_generator import generate_risks
from app.services.evaluation.risk_persister import list_risk_items, persist_risks

__all__ = [
    "ControlNotFoundError",
    "EvaluationNotFoundError",
    "EvaluationTimeoutError",
    "ObligationNotFoundError",
    "TenantNotFoundError",
    "calculate_evidence_freshness",
    "calculate_readiness_score",
    "evaluate_control",
    "evaluate_obligation",
    "evaluate_requirement",
    "generate_risks",
    "get_job_history",
    "list_risk_items",
    "persist_risks",
    "run_evaluation_batch",
    "run_full_evaluation",
    "run_nightly_evaluation",
    "run_weekly_deep_evaluation",
    "trigger_manual_evaluation",
]
