"""Inbound contact form schemas."""

from pydantic import BaseModel, Field
from typing import Optional


class ContactFormPayload(BaseModel):
    """Lead submitted through the public contact form."""
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)  # EmailStr is too strict for form input
    company: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    whatsapp: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=120)
    state: Optional[str] = Field(None, max_length=120)
    country: Optional[str] = Field(None, max_length=120)
    business_type: Optional[str] = Field(None, max_length=120)
    message: str = Field(..., min_length=1, max_length=10000)
    source: str = "contact_form"


class WebhookResponse(BaseModel):
    """Standard webhook response."""
    ok: bool
    id: str
    message: str
