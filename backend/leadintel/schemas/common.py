"""Shared response schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    redis: str
    geo_tables: str


class ScoringStats(BaseModel):
    """Aggregate view of AI scoring over a set of leads.

    Each figure counts only the leads where its own field is set: the
    score average ignores unscored leads, the temperature buckets ignore
    leads without a temperature, the rate average ignores missing rates.
    """

    total_analyzed: int = 0
    average_score: float = 0.0
    hot_leads: int = 0
    warm_leads: int = 0
    cold_leads: int = 0
    average_conversion_rate: float = 0.0


class QueuedResponse(BaseModel):
    queued: bool
    detail: str
