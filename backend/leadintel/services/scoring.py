"""AI scoring collaborator - Claude reads a lead and writes back score fields.

Scoring only touches lead_score, lead_temperature, predicted_conversion_rate,
ai_suggestions, ai_analysis and last_ai_analysis. It never changes status,
assignment or interaction counters.
"""

import json
import uuid
from datetime import datetime
from typing import Callable, Optional

import anthropic
import structlog
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError
from rq import Retry
from sqlalchemy.orm import Session

from leadintel.config import settings
from leadintel.errors import NotFoundError, ValidationError
from leadintel.models.enums import LeadTemperature
from leadintel.models.lead import Lead
from leadintel.queues import get_queue

logger = structlog.get_logger()

SCORING_QUEUE = "scoring"

SYSTEM_PROMPT = """You are a B2B sales analyst for a vehicle diagnostics equipment brand.
Score inbound leads 0-100 based on: business fit, intent clarity, urgency and location.
Classify temperature as hot, warm or cold. Suggest concrete next actions for the sales team."""


class ScoringResult(BaseModel):
    lead_score: int = Field(..., ge=0, le=100)
    lead_temperature: LeadTemperature
    predicted_conversion_rate: float = Field(..., ge=0.0, le=1.0)
    ai_suggestions: list[str] = []
    summary: Optional[str] = None


def parse_scoring_response(content: str) -> ScoringResult:
    """Pull the JSON object out of a model reply and validate it."""
    if "{" not in content or "}" not in content:
        raise ValidationError("Scoring response contains no JSON object")
    json_str = content[content.index("{"):content.rindex("}") + 1]
    try:
        return ScoringResult.model_validate(json.loads(json_str))
    except (json.JSONDecodeError, SchemaError) as e:
        raise ValidationError(f"Invalid scoring response: {e}") from e


def build_scoring_prompt(lead: Lead) -> str:
    location = ", ".join(filter(None, [lead.cidade, lead.estado, lead.pais])) or "Unknown"
    return f"""Score this sales lead.

Name: {lead.name}
Email: {lead.email}
Company: {lead.company or 'N/A'}
Business Type: {lead.business_type or 'N/A'}
Location: {location}
Region: {lead.regiao or 'N/A'}
Source: {lead.source}
Status: {lead.status}
Interactions so far: {lead.interaction_count or 0}
Message: {lead.message or 'N/A'}

Return JSON only, in this exact structure:
{{
  "lead_score": <0-100>,
  "lead_temperature": "<hot|warm|cold>",
  "predicted_conversion_rate": <0.0 to 1.0>,
  "ai_suggestions": ["<next action 1>", "<next action 2>"],
  "summary": "<1-2 sentence assessment>"
}}"""


def apply_ai_scoring(
    session: Session,
    lead_id: uuid.UUID,
    result: ScoringResult,
    clock: Callable[[], datetime] = datetime.utcnow,
    model: str | None = None,
) -> Lead:
    try:
        lead = session.get(Lead, lead_id)
        if lead is None:
            raise NotFoundError("lead", lead_id)
        lead.lead_score = result.lead_score
        lead.lead_temperature = result.lead_temperature.value
        lead.predicted_conversion_rate = result.predicted_conversion_rate
        lead.ai_suggestions = list(result.ai_suggestions)
        lead.ai_analysis = {"summary": result.summary, "model": model}
        lead.last_ai_analysis = clock()
        session.commit()
    except Exception:
        session.rollback()
        raise
    return lead


class LeadScorer:
    """Scores leads with Claude."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        client=None,
    ):
        key = api_key or settings.anthropic_api_key
        if client is None and not key:
            raise ValueError("No Anthropic API key configured for lead scoring")
        self._client = client or anthropic.AsyncAnthropic(api_key=key)
        self.model = model or settings.scoring_model
        self.max_tokens = max_tokens or settings.scoring_max_tokens

    async def score(self, lead: Lead) -> ScoringResult:
        response = await self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_scoring_prompt(lead)}],
        )
        logger.info(
            "lead_scoring_response",
            lead_id=str(lead.id),
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return parse_scoring_response(response.content[0].text)


def enqueue_lead_scoring(lead_ids: list[str], queue_factory=None) -> bool:
    """Queue scoring for one or more leads. Returns False when the queue is unreachable."""
    try:
        queue = queue_factory() if queue_factory else get_queue(SCORING_QUEUE)
        if len(lead_ids) == 1:
            queue.enqueue(
                "leadintel.workers.lead_scoring.analyze_lead",
                lead_ids[0],
                job_timeout=120,
                retry=Retry(max=2, interval=[30, 120]),
            )
        else:
            queue.enqueue(
                "leadintel.workers.lead_scoring.batch_analyze",
                lead_ids,
                job_timeout=120 * len(lead_ids),
            )
    except Exception as e:
        logger.error("lead_scoring_enqueue_failed", lead_ids=lead_ids, error=str(e))
        return False
    logger.info("lead_scoring_enqueued", count=len(lead_ids))
    return True
