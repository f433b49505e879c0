"""Lead status history - append-only audit trail of status transitions."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leadintel.database import Base


class LeadStatusHistory(Base):
    __tablename__ = "lead_status_history"
    __table_args__ = (
        Index("ix_lead_status_history_lead", "lead_id", "created_at"),
        UniqueConstraint("lead_id", "sequence", name="uq_lead_status_history_sequence"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lead_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("leads.id"), nullable=False)

    old_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    new_status: Mapped[str] = mapped_column(String(30), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    changed_by: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    # Per-lead ordinal; timestamps alone can tie within one clock tick
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
