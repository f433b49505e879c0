"""Lead pipeline endpoints - listing, detail, transitions, assignment, interactions, stats."""

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from leadintel.api.health import ERRORS, INTERACTIONS, STATUS_TRANSITIONS
from leadintel.database import get_db
from leadintel.errors import LeadPipelineError, NotFoundError, TerminalStateError
from leadintel.geo import GeoDistribution, GeoResolver, get_geo_resolver
from leadintel.middleware.auth import get_acting_user_id, verify_admin_token
from leadintel.models.enums import LeadStatus
from leadintel.models.lead import Lead
from leadintel.schemas.common import QueuedResponse, ScoringStats
from leadintel.schemas.lead import (
    AssignRequest, BatchAnalyzeRequest, InteractionCreate, InteractionResponse,
    LeadDetailResponse, LeadListResponse, LeadResponse, StatusHistoryResponse, StatusUpdateRequest,
)
from leadintel.services.notifications import NotificationDispatcher, get_dispatcher
from leadintel.services.pipeline import LeadPipeline
from leadintel.services.scoring import enqueue_lead_scoring

router = APIRouter(prefix="/leads", tags=["leads"])

SORT_COLUMNS = {
    "created_at": Lead.created_at,
    "lead_score": Lead.lead_score,
    "last_interaction": Lead.last_interaction,
}


def get_pipeline(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> LeadPipeline:
    return LeadPipeline(db, notifier=dispatcher)


def _http_error(exc: LeadPipelineError) -> HTTPException:
    ERRORS.labels(type=type(exc).__name__).inc()
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, TerminalStateError):
        return HTTPException(status_code=409, detail=exc.message)
    return HTTPException(status_code=422, detail=exc.message)


@router.get("", response_model=LeadListResponse)
def list_leads(
    status: LeadStatus | None = None,
    assigned_to: UUID | None = None,
    search: str | None = Query(None, max_length=200),
    min_score: int | None = Query(None, ge=0, le=100),
    max_score: int | None = Query(None, ge=0, le=100),
    sort_by: Literal["created_at", "lead_score", "last_interaction"] = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    admin: str = Depends(verify_admin_token),
    db: Session = Depends(get_db),
):
    """List leads with optional filters."""
    query = select(Lead)
    if status:
        query = query.where(Lead.status == status.value)
    if assigned_to:
        query = query.where(Lead.assigned_to == assigned_to)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Lead.name.ilike(pattern),
            Lead.email.ilike(pattern),
            Lead.company.ilike(pattern),
            Lead.message.ilike(pattern),
        ))
    if min_score is not None:
        query = query.where(Lead.lead_score >= min_score)
    if max_score is not None:
        query = query.where(Lead.lead_score <= max_score)

    total = db.execute(select(func.count()).select_from(query.subquery())).scalar_one()

    column = SORT_COLUMNS[sort_by]
    ordering = column.asc() if sort_order == "asc" else column.desc()
    query = query.order_by(ordering.nulls_last(), Lead.id).offset((page - 1) * per_page).limit(per_page)

    leads = db.execute(query).scalars().all()
    return LeadListResponse(
        items=[LeadResponse.model_validate(lead) for lead in leads],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/stats/ai", response_model=ScoringStats)
def scoring_stats(
    admin: str = Depends(verify_admin_token),
    db: Session = Depends(get_db),
):
    """Aggregate AI scoring figures over every lead."""
    rows = db.execute(
        select(Lead.lead_score, Lead.lead_temperature, Lead.predicted_conversion_rate)
    ).all()
    return LeadPipeline.aggregate_stats(rows)


@router.get("/stats/geographic", response_model=GeoDistribution)
def geographic_stats(
    admin: str = Depends(verify_admin_token),
    db: Session = Depends(get_db),
    resolver: GeoResolver = Depends(get_geo_resolver),
):
    """Lead counts by state, country, region and continent of their phone."""
    leads = db.scalars(select(Lead)).all()
    return resolver.distribution(lead.contact_phone for lead in leads)


@router.post("/analyze", response_model=QueuedResponse)
def analyze_leads(
    req: BatchAnalyzeRequest,
    admin: str = Depends(verify_admin_token),
):
    """Queue AI scoring for a batch of leads."""
    queued = enqueue_lead_scoring([str(lead_id) for lead_id in req.lead_ids])
    if not queued:
        ERRORS.labels(type="queue").inc()
        raise HTTPException(status_code=503, detail="Scoring queue unavailable")
    return QueuedResponse(queued=True, detail=f"{len(req.lead_ids)} leads queued for analysis")


@router.get("/{lead_id}", response_model=LeadDetailResponse)
def get_lead(
    lead_id: UUID,
    admin: str = Depends(verify_admin_token),
    pipeline: LeadPipeline = Depends(get_pipeline),
):
    """Lead with its status history (oldest first) and interactions (newest first)."""
    try:
        lead = pipeline.get_lead(lead_id)
        history = pipeline.status_history(lead_id)
        interactions = pipeline.interactions(lead_id)
    except LeadPipelineError as e:
        raise _http_error(e)

    detail = LeadDetailResponse.model_validate(lead)
    return detail.model_copy(update={
        "status_history": [StatusHistoryResponse.model_validate(h) for h in history],
        "interactions": [InteractionResponse.model_validate(i) for i in interactions],
    })


@router.put("/{lead_id}/status", response_model=LeadResponse)
def update_status(
    lead_id: UUID,
    req: StatusUpdateRequest,
    user_id: UUID = Depends(get_acting_user_id),
    pipeline: LeadPipeline = Depends(get_pipeline),
):
    try:
        lead = pipeline.transition(lead_id, req.new_status, user_id, reason=req.reason, notes=req.notes)
    except LeadPipelineError as e:
        raise _http_error(e)
    STATUS_TRANSITIONS.labels(new_status=lead.status).inc()
    return LeadResponse.model_validate(lead)


@router.post("/{lead_id}/assign", response_model=LeadResponse)
def assign_lead(
    lead_id: UUID,
    req: AssignRequest,
    user_id: UUID = Depends(get_acting_user_id),
    pipeline: LeadPipeline = Depends(get_pipeline),
):
    try:
        lead = pipeline.assign(lead_id, req.user_id, user_id)
    except LeadPipelineError as e:
        raise _http_error(e)
    return LeadResponse.model_validate(lead)


@router.post("/{lead_id}/interactions", response_model=InteractionResponse, status_code=201)
def add_interaction(
    lead_id: UUID,
    req: InteractionCreate,
    user_id: UUID = Depends(get_acting_user_id),
    pipeline: LeadPipeline = Depends(get_pipeline),
):
    try:
        interaction = pipeline.add_interaction(lead_id, req.type, req.content, user_id)
    except LeadPipelineError as e:
        raise _http_error(e)
    INTERACTIONS.labels(type=interaction.type).inc()
    return InteractionResponse.model_validate(interaction)


@router.post("/{lead_id}/analyze", response_model=QueuedResponse)
def analyze_lead(
    lead_id: UUID,
    admin: str = Depends(verify_admin_token),
    pipeline: LeadPipeline = Depends(get_pipeline),
):
    """Queue AI scoring for one lead."""
    try:
        pipeline.get_lead(lead_id)
    except LeadPipelineError as e:
        raise _http_error(e)
    if not enqueue_lead_scoring([str(lead_id)]):
        ERRORS.labels(type="queue").inc()
        raise HTTPException(status_code=503, detail="Scoring queue unavailable")
    return QueuedResponse(queued=True, detail="Lead queued for analysis")
