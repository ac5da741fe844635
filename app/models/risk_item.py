"""RiskItem model: persisted, user-visible compliance gap."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.session import Base
from app.models.enums import RiskStatus

RISK_TITLE_MAX_LENGTH = 1024


class RiskItem(Base):
    """Risk item. Rows written by the evaluation engine carry AUTO_RISK_TITLE_PREFIX in title."""

    __tablename__ = "risk_items"

    # Titles can exceed btree entry limits, so auto-risk lookups filter on tenant_id only
    __table_args__ = (Index("ix_risk_items_tenant_id", "tenant_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(RISK_TITLE_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), default=RiskStatus.OPEN.value, nullable=False)
    obligation_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("obligations.id", ondelete="SET NULL"), nullable=True
    )
    control_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("controls.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
