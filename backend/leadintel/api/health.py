"""Health check and metrics endpoints."""

from fastapi import APIRouter, Response
from prometheus_client import Counter, generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy import text

from leadintel import __version__
from leadintel.database import SessionLocal
from leadintel.geo import get_geo_resolver
from leadintel.queues import get_redis
from leadintel.schemas.common import HealthResponse

router = APIRouter(tags=["health"])

# Prometheus metrics
LEADS_INGESTED = Counter("leads_ingested_total", "Total inbound leads", ["source"])
STATUS_TRANSITIONS = Counter("lead_status_transitions_total", "Lead status transitions", ["new_status"])
INTERACTIONS = Counter("lead_interactions_total", "Recorded lead interactions", ["type"])
GEO_LOOKUPS = Counter("geo_lookups_total", "Phone geo resolutions", ["outcome"])
ERRORS = Counter("errors_total", "Total errors", ["type"])


@router.get("/health", response_model=HealthResponse)
def health_check():
    """Health check endpoint."""
    db_status = "ok"
    redis_status = "ok"
    geo_status = "ok"

    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except Exception:
        db_status = "error"

    try:
        get_redis().ping()
    except Exception:
        redis_status = "error"

    try:
        get_geo_resolver()
    except Exception:
        geo_status = "error"

    healthy = db_status == "ok" and redis_status == "ok" and geo_status == "ok"
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        database=db_status,
        redis=redis_status,
        geo_tables=geo_status,
    )


@router.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
