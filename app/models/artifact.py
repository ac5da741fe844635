"""Artifact model and the explicit artifact ↔ evidence requirement link."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base


class Artifact(Base):
    """Uploaded evidence document. Storage and upload handling live elsewhere."""

    __tablename__ = "artifacts"

    __table_args__ = (
        Index("ix_artifacts_tenant_uploaded_at", "tenant_id", "uploaded_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class ArtifactEvidenceRequirement(Base):
    """Which artifact satisfies which requirement. The only path evaluation uses."""

    __tablename__ = "artifact_evidence_requirements"

    artifact_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("artifacts.id", ondelete="CASCADE"), primary_key=True
    )
    evidence_requirement_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("evidence_requirements.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    artifact: Mapped[Artifact] = relationship("Artifact")
