"""SQLAlchemy models."""

from app.models.artifact import Artifact, ArtifactEvidenceRequirement
from app.models.control import Control
from app.models.evidence_requirement import EvidenceRequirement
from app.models.job_run import JobRun
from app.models.obligation import Obligation, control_obligations
from app.models.risk_item import RiskItem
from app.models.tenant import Tenant

__all__ = [
    "Artifact",
    "ArtifactEvidenceRequirement",
    "Control",
    "EvidenceRequirement",
    "JobRun",
    "Obligation",
    "RiskItem",
    "Tenant",
    "control_obligations",
]
