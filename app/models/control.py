"""Control model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base
from app.models.obligation import control_obligations

if TYPE_CHECKING:
    from app.models.evidence_requirement import EvidenceRequirement
    from app.models.obligation import Obligation


class Control(Base):
    """Operational mechanism implemented to satisfy one or more obligations."""

    __tablename__ = "controls"

    __table_args__ = (Index("ix_controls_tenant_code", "tenant_id", "code"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    evidence_requirements: Mapped[list[EvidenceRequirement]] = relationship(
        "EvidenceRequirement",
        back_populates="control",
        cascade="all, delete-orphan",
        order_by="EvidenceRequirement.code",
    )
    obligations: Mapped[list[Obligation]] = relationship(
        "Obligation",
        secondary=control_obligations,
        back_populates="controls",
    )
