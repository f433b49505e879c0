"""Lead interaction model - notes, calls, emails and WhatsApp contacts."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leadintel.database import Base


class LeadInteraction(Base):
    __tablename__ = "lead_interactions"
    __table_args__ = (
        Index("ix_lead_interactions_lead", "lead_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lead_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("leads.id"), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False)

    type: Mapped[str] = mapped_column(String(20), nullable=False)  # note, call, email, whatsapp
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
