"""Lead pipeline - the only writer of lead status, assignment and interaction counters.

Every status change appends exactly one LeadStatusHistory row in the same
commit as the status write. Leads in closed_won or closed_lost are locked:
no further transition is accepted. Notifications go out only after the
commit and their failure never undoes the change.
"""

import uuid
from datetime import datetime
from typing import Callable, Iterable

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from leadintel.errors import InvalidStatusError, NotFoundError, TerminalStateError, ValidationError
from leadintel.models.enums import TERMINAL_STATUSES, InteractionType, LeadStatus, LeadTemperature
from leadintel.models.interaction import LeadInteraction
from leadintel.models.lead import Lead
from leadintel.models.status_history import LeadStatusHistory
from leadintel.schemas.common import ScoringStats
from leadintel.services.notifications import LEAD_ASSIGNED, LEAD_STATUS_CHANGED
from leadintel.services.users import SqlUserDirectory, UserDirectory

logger = structlog.get_logger()

# Stored statuses are plain strings; Enum members hash by name, not value
_TERMINAL_VALUES = frozenset(status.value for status in TERMINAL_STATUSES)


def _coerce_status(value) -> LeadStatus:
    try:
        return LeadStatus(value)
    except ValueError:
        raise InvalidStatusError(value) from None


def _coerce_interaction_type(value) -> InteractionType:
    try:
        return InteractionType(value)
    except ValueError:
        raise ValidationError(f"Invalid interaction type: {value!r}") from None


def aggregate_stats(leads: Iterable) -> ScoringStats:
    """Scoring stats over objects exposing lead_score, lead_temperature and
    predicted_conversion_rate. Each figure only looks at its own field, so a
    lead with a temperature but no score still lands in its bucket. Averages
    are 0.0 when nothing qualifies."""
    leads = list(leads)
    scores = [lead.lead_score for lead in leads if lead.lead_score is not None]
    temperatures = [lead.lead_temperature for lead in leads if lead.lead_temperature is not None]
    rates = [lead.predicted_conversion_rate for lead in leads if lead.predicted_conversion_rate is not None]

    return ScoringStats(
        total_analyzed=len(scores),
        average_score=sum(scores) / len(scores) if scores else 0.0,
        hot_leads=temperatures.count(LeadTemperature.HOT.value),
        warm_leads=temperatures.count(LeadTemperature.WARM.value),
        cold_leads=temperatures.count(LeadTemperature.COLD.value),
        average_conversion_rate=sum(rates) / len(rates) if rates else 0.0,
    )


class LeadPipeline:
    def __init__(
        self,
        session: Session,
        user_directory: UserDirectory | None = None,
        notifier=None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.session = session
        self.users = user_directory or SqlUserDirectory(session)
        self.notifier = notifier
        self.clock = clock

    # Reads

    def get_lead(self, lead_id: uuid.UUID) -> Lead:
        lead = self.session.get(Lead, lead_id)
        if lead is None:
            raise NotFoundError("lead", lead_id)
        return lead

    def status_history(self, lead_id: uuid.UUID) -> list[LeadStatusHistory]:
        """Transitions of a lead, oldest first."""
        self.get_lead(lead_id)
        result = self.session.execute(
            select(LeadStatusHistory)
            .where(LeadStatusHistory.lead_id == lead_id)
            .order_by(LeadStatusHistory.sequence)
        )
        return list(result.scalars().all())

    def interactions(self, lead_id: uuid.UUID) -> list[LeadInteraction]:
        """Interactions of a lead, newest first."""
        self.get_lead(lead_id)
        result = self.session.execute(
            select(LeadInteraction)
            .where(LeadInteraction.lead_id == lead_id)
            .order_by(LeadInteraction.created_at.desc())
        )
        return list(result.scalars().all())

    aggregate_stats = staticmethod(aggregate_stats)

    # Writes

    def _lock_lead(self, lead_id: uuid.UUID) -> Lead:
        # Row lock serializes concurrent writers of the same lead (no-op on SQLite)
        result = self.session.execute(select(Lead).where(Lead.id == lead_id).with_for_update())
        lead = result.scalar_one_or_none()
        if lead is None:
            raise NotFoundError("lead", lead_id)
        return lead

    def _next_sequence(self, lead_id: uuid.UUID) -> int:
        current = self.session.execute(
            select(func.max(LeadStatusHistory.sequence)).where(LeadStatusHistory.lead_id == lead_id)
        ).scalar()
        return (current or 0) + 1

    def transition(
        self,
        lead_id: uuid.UUID,
        new_status,
        acting_user_id: uuid.UUID,
        reason: str | None = None,
        notes: str | None = None,
    ) -> Lead:
        """Move a lead to new_status and record the change.

        Raises NotFoundError for an unknown lead, TerminalStateError when the
        lead is already closed, InvalidStatusError for an unknown status.
        A transition to the current status is accepted and recorded.
        """
        try:
            lead = self._lock_lead(lead_id)
            old_status = lead.status
            if old_status in _TERMINAL_VALUES:
                raise TerminalStateError(lead_id, old_status)
            status = _coerce_status(new_status)

            now = self.clock()
            lead.status = status.value
            if status is LeadStatus.CLOSED_WON:
                lead.conversion_date = now
            elif status is LeadStatus.CLOSED_LOST and reason:
                lead.rejection_reason = reason

            self.session.add(LeadStatusHistory(
                lead_id=lead.id,
                old_status=old_status,
                new_status=status.value,
                reason=reason,
                notes=notes,
                changed_by=acting_user_id,
                created_at=now,
                sequence=self._next_sequence(lead.id),
            ))
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "lead_status_changed",
            lead_id=str(lead.id),
            old_status=old_status,
            new_status=lead.status,
            changed_by=str(acting_user_id),
        )
        self._notify(LEAD_STATUS_CHANGED, {
            "lead_id": str(lead.id),
            "name": lead.name,
            "old_status": old_status,
            "new_status": lead.status,
            "reason": reason,
        })
        return lead

    def assign(self, lead_id: uuid.UUID, user_id: uuid.UUID, acting_user_id: uuid.UUID) -> Lead:
        try:
            lead = self._lock_lead(lead_id)
            if not self.users.exists(user_id):
                raise NotFoundError("user", user_id)
            lead.assigned_to = user_id
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "lead_assigned",
            lead_id=str(lead.id),
            assigned_to=str(user_id),
            assigned_by=str(acting_user_id),
        )
        self._notify(LEAD_ASSIGNED, {
            "lead_id": str(lead.id),
            "name": lead.name,
            "user_id": str(user_id),
            "assignee_name": self.users.display_name(user_id),
        })
        return lead

    def add_interaction(
        self,
        lead_id: uuid.UUID,
        interaction_type,
        content: str,
        acting_user_id: uuid.UUID,
    ) -> LeadInteraction:
        """Record an interaction and bump the lead's counters in one commit."""
        try:
            kind = _coerce_interaction_type(interaction_type)
            if not content or not content.strip():
                raise ValidationError("Interaction content must not be empty")
            lead = self._lock_lead(lead_id)

            now = self.clock()
            interaction = LeadInteraction(
                lead_id=lead.id,
                user_id=acting_user_id,
                type=kind.value,
                content=content,
                created_at=now,
            )
            self.session.add(interaction)
            lead.interaction_count = (lead.interaction_count or 0) + 1
            lead.last_interaction = now
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

        logger.info(
            "lead_interaction_added",
            lead_id=str(lead.id),
            type=kind.value,
            interaction_count=lead.interaction_count,
        )
        return interaction

    def _notify(self, event: str, payload: dict) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.dispatch(event, payload)
        except Exception as e:
            # The lead change is already committed
            logger.error("notification_dispatch_failed", notification=event, error=str(e))
