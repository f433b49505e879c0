"""Webhook intake endpoint for the public contact form."""

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from leadintel.api.health import ERRORS, GEO_LOOKUPS, LEADS_INGESTED
from leadintel.config import settings
from leadintel.database import get_db
from leadintel.geo import GeoResolver, get_geo_resolver
from leadintel.models.enums import LeadStatus
from leadintel.models.lead import Lead
from leadintel.schemas.webhook import ContactFormPayload, WebhookResponse
from leadintel.services.notifications import LEAD_CREATED, NotificationDispatcher, get_dispatcher
from leadintel.services.scoring import enqueue_lead_scoring

logger = structlog.get_logger()
router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/contact", response_model=WebhookResponse)
def ingest_contact_form(
    payload: ContactFormPayload,
    db: Session = Depends(get_db),
    resolver: GeoResolver = Depends(get_geo_resolver),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Store an inbound lead enriched with the geo profile of its phone."""
    LEADS_INGESTED.labels(source=payload.source).inc()

    # New leads start without history; the first transition records "new" as old_status
    lead_id = uuid.uuid4()
    lead = Lead(
        id=lead_id,
        source=payload.source,
        name=payload.name,
        email=payload.email,
        company=payload.company,
        phone=payload.phone,
        whatsapp=payload.whatsapp,
        city=payload.city,
        state=payload.state,
        country=payload.country,
        business_type=payload.business_type,
        message=payload.message,
        status=LeadStatus.NEW.value,
    )

    profile = resolver.resolve(lead.contact_phone)
    GEO_LOOKUPS.labels(outcome="miss" if profile.is_empty() else "hit").inc()
    lead.geo_data = profile.model_dump(exclude_none=True)
    for column, value in profile.to_lead_fields().items():
        setattr(lead, column, value)

    db.add(lead)
    db.commit()

    if settings.scoring_enabled and not enqueue_lead_scoring([str(lead_id)]):
        ERRORS.labels(type="queue").inc()

    dispatcher.dispatch(LEAD_CREATED, {
        "lead_id": str(lead_id),
        "name": lead.name,
        "company": lead.company,
        "email": lead.email,
        "message": lead.message,
        "cidade": lead.cidade,
        "estado": lead.estado,
        "pais": lead.pais,
    })

    logger.info("lead_ingested", lead_id=str(lead_id), source=payload.source,
                estado=lead.estado, pais=lead.pais)

    return WebhookResponse(
        ok=True,
        id=str(lead_id),
        message="Lead received",
    )
