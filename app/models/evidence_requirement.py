"""EvidenceRequirement model: a document/record a control needs, with a refresh cadence."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.control import Control


class EvidenceRequirement(Base):
    """Evidence requirement owned by a control.

    is_mandatory: linked evidence must be approved before it can pass.
    cadence_type: CadenceType value; unknown values fall back to
    cadence_review_months (or one month). NULL means MONTHLY.
    """

    __tablename__ = "evidence_requirements"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    control_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("controls.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(512), nullable=False)
    is_mandatory: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    cadence_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    cadence_review_months: Mapped[int | None] = mapped_column(Integer, nullable=True)

    control: Mapped[Control] = relationship("Control", back_populates="evidence_requirements")
