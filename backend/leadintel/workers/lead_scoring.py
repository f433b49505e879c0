"""Lead scoring worker tasks.

analyze_lead scores one lead with Claude and writes the score fields back.
batch_analyze runs analyze_lead over many leads; one failure does not stop
the rest.
"""

import structlog

from leadintel.services.scoring import LeadScorer, apply_ai_scoring
from leadintel.workers.base import get_sync_session, load_lead, run_async

logger = structlog.get_logger()


def analyze_lead(lead_id: str) -> dict:
    """Main entry point for single-lead scoring."""
    session = get_sync_session()
    try:
        lead = load_lead(session, lead_id)
        scorer = LeadScorer()
        result = run_async(scorer.score(lead))
        apply_ai_scoring(session, lead.id, result, model=scorer.model)

        logger.info(
            "lead_scored",
            lead_id=lead_id,
            lead_score=result.lead_score,
            lead_temperature=result.lead_temperature.value,
        )
        return {
            "lead_id": lead_id,
            "lead_score": result.lead_score,
            "lead_temperature": result.lead_temperature.value,
        }
    except Exception as e:
        logger.error("lead_scoring_failed", lead_id=lead_id, error=str(e))
        raise
    finally:
        session.close()


def batch_analyze(lead_ids: list[str]) -> dict:
    analyzed, failed = [], []
    for lead_id in lead_ids:
        try:
            analyze_lead(lead_id)
        except Exception:
            # already logged by analyze_lead
            failed.append(lead_id)
        else:
            analyzed.append(lead_id)

    logger.info("lead_batch_scoring_completed", analyzed=len(analyzed), failed=len(failed))
    return {"analyzed": analyzed, "failed": failed}
