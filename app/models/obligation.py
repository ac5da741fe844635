"""Obligation model and the control ↔ obligation association table."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.session import Base

if TYPE_CHECKING:
    from app.models.control import Control

control_obligations = Table(
    "control_obligations",
    Base.metadata,
    Column(
        "control_id",
        Uuid,
        ForeignKey("controls.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "obligation_id",
        Uuid,
        ForeignKey("obligations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Obligation(Base):
    """A regulatory requirement a tenant must satisfy."""

    __tablename__ = "obligations"

    __table_args__ = (Index("ix_obligations_tenant_code", "tenant_id", "code"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(128), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    domain: Mapped[str | None] = mapped_column(String(32), nullable=True)  # ObligationDomain
    severity: Mapped[str | None] = mapped_column(String(16), nullable=True)  # Severity
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    controls: Mapped[list[Control]] = relationship(
        "Control",
        secondary=control_obligations,
        back_populates="obligations",
        order_by="Control.code",
    )
