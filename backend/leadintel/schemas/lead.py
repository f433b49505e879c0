"""Lead pipeline request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from leadintel.models.enums import InteractionType


# --- Requests ---

class StatusUpdateRequest(BaseModel):
    # Checked by the pipeline so lead lookup and the closed-lead lock come first
    new_status: str = Field(..., min_length=1, max_length=50)
    reason: Optional[str] = Field(None, max_length=1000)
    notes: Optional[str] = Field(None, max_length=5000)


class AssignRequest(BaseModel):
    user_id: uuid.UUID


class InteractionCreate(BaseModel):
    type: InteractionType
    content: str = Field(..., max_length=10000)


class BatchAnalyzeRequest(BaseModel):
    lead_ids: list[uuid.UUID] = Field(..., min_length=1, max_length=100)


# --- Responses ---

class LeadResponse(BaseModel):
    id: uuid.UUID
    source: str
    name: str
    email: str
    company: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    business_type: Optional[str] = None
    message: Optional[str] = None

    status: str
    assigned_to: Optional[uuid.UUID] = None
    conversion_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    lead_score: Optional[int] = None
    lead_temperature: Optional[str] = None
    predicted_conversion_rate: Optional[float] = None
    ai_suggestions: Optional[list] = None
    last_ai_analysis: Optional[datetime] = None

    ddd: Optional[str] = None
    ddi: Optional[str] = None
    estado: Optional[str] = None
    cidade: Optional[str] = None
    pais: Optional[str] = None
    continente: Optional[str] = None
    regiao: Optional[str] = None

    interaction_count: int = 0
    last_interaction: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusHistoryResponse(BaseModel):
    id: uuid.UUID
    old_status: Optional[str] = None
    new_status: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    changed_by: uuid.UUID
    created_at: datetime

    model_config = {"from_attributes": True}


class InteractionResponse(BaseModel):
    id: uuid.UUID
    lead_id: uuid.UUID
    user_id: uuid.UUID
    type: str
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class LeadDetailResponse(LeadResponse):
    ai_analysis: Optional[dict] = None
    geo_data: Optional[dict] = None
    status_history: list[StatusHistoryResponse] = []
    interactions: list[InteractionResponse] = []


class LeadListResponse(BaseModel):
    items: list[LeadResponse]
    total: int
    page: int
    per_page: int
