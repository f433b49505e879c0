"""Base worker utilities for RQ tasks."""

import asyncio
import uuid

from sqlalchemy.orm import Session

from leadintel.database import get_sync_session
from leadintel.errors import NotFoundError
from leadintel.models.lead import Lead

__all__ = ["get_sync_session", "load_lead", "run_async"]


def run_async(coro):
    """Run an async coroutine from sync RQ worker context."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def load_lead(session: Session, lead_id: str) -> Lead:
    lead = session.get(Lead, uuid.UUID(lead_id))
    if lead is None:
        raise NotFoundError("lead", lead_id)
    return lead
