"""Sales lead model."""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, Float, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leadintel.database import Base, JSONType


class Lead(Base):
    __tablename__ = "leads"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Contact info (from the inbound contact form)
    source: Mapped[str] = mapped_column(String(50), default="contact_form")  # contact_form, booking, api
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    whatsapp: Mapped[str | None] = mapped_column(String(50), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    country: Mapped[str | None] = mapped_column(String(120), nullable=True)
    business_type: Mapped[str | None] = mapped_column(String(120), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Workflow - only LeadPipeline.transition() writes status
    status: Mapped[str] = mapped_column(String(30), default="new", index=True)
    assigned_to: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True, index=True)
    conversion_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Scoring (written by the AI scoring collaborator)
    lead_score: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 0-100
    lead_temperature: Mapped[str | None] = mapped_column(String(10), nullable=True)  # hot, warm, cold
    predicted_conversion_rate: Mapped[float | None] = mapped_column(Float, nullable=True)  # 0.0-1.0
    ai_suggestions: Mapped[list | None] = mapped_column(JSONType, nullable=True)  # ordered list of strings
    ai_analysis: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    last_ai_analysis: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Geo enrichment, flattened from the GeoProfile of the lead's phone
    ddd: Mapped[str | None] = mapped_column(String(2), nullable=True)
    ddi: Mapped[str | None] = mapped_column(String(5), nullable=True)
    estado: Mapped[str | None] = mapped_column(String(2), nullable=True, index=True)
    cidade: Mapped[str | None] = mapped_column(String(120), nullable=True)
    pais: Mapped[str | None] = mapped_column(String(120), nullable=True)
    continente: Mapped[str | None] = mapped_column(String(60), nullable=True)
    regiao: Mapped[str | None] = mapped_column(String(30), nullable=True)
    geo_data: Mapped[dict | None] = mapped_column(JSONType, nullable=True)  # full GeoProfile

    # Counters - only LeadPipeline.add_interaction() writes these
    interaction_count: Mapped[int] = mapped_column(Integer, default=0)
    last_interaction: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def contact_phone(self) -> str | None:
        """Number used for geo enrichment; the form's WhatsApp field wins."""
        return self.whatsapp or self.phone

    def __repr__(self) -> str:
        return f"<Lead {self.id} {self.status}>"
