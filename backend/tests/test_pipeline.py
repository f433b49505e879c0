"""Tests for the lead pipeline state machine."""

import uuid
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from leadintel.errors import InvalidStatusError, NotFoundError, TerminalStateError, ValidationError
from leadintel.models import Lead, LeadInteraction, LeadStatus, LeadStatusHistory
from leadintel.services.notifications import LEAD_ASSIGNED, LEAD_STATUS_CHANGED
from leadintel.services.pipeline import LeadPipeline


def _history_count(session, lead_id) -> int:
    return session.execute(
        select(func.count()).select_from(LeadStatusHistory).where(LeadStatusHistory.lead_id == lead_id)
    ).scalar_one()


class TestTransition:
    @pytest.fixture(autouse=True)
    def _setup(self, db_session, admin_user, lead, clock):
        self.session = db_session
        self.admin = admin_user
        self.lead = lead
        self.clock = clock
        self.notifier = MagicMock()
        self.pipeline = LeadPipeline(db_session, notifier=self.notifier, clock=clock)

    def test_records_history(self):
        updated = self.pipeline.transition(self.lead.id, "contacted", self.admin.id, reason="Ligação feita")
        assert updated.status == "contacted"

        history = self.pipeline.status_history(self.lead.id)
        assert len(history) == 1
        assert history[0].old_status == "new"
        assert history[0].new_status == "contacted"
        assert history[0].reason == "Ligação feita"
        assert history[0].changed_by == self.admin.id

    def test_every_transition_adds_exactly_one_entry(self):
        for status in ("contacted", "qualified", "contacted", "nurturing", "proposal"):
            self.pipeline.transition(self.lead.id, status, self.admin.id)
        history = self.pipeline.status_history(self.lead.id)
        assert [h.new_status for h in history] == ["contacted", "qualified", "contacted", "nurturing", "proposal"]
        assert [h.sequence for h in history] == [1, 2, 3, 4, 5]

    def test_history_chains_old_to_new(self):
        for status in ("contacted", "qualified", "negotiation"):
            self.pipeline.transition(self.lead.id, status, self.admin.id)
        history = self.pipeline.status_history(self.lead.id)
        for previous, current in zip(history, history[1:]):
            assert current.old_status == previous.new_status

    def test_same_status_is_recorded(self):
        self.pipeline.transition(self.lead.id, "new", self.admin.id)
        history = self.pipeline.status_history(self.lead.id)
        assert len(history) == 1
        assert history[0].old_status == history[0].new_status == "new"

    def test_accepts_enum_member(self):
        updated = self.pipeline.transition(self.lead.id, LeadStatus.QUALIFIED, self.admin.id)
        assert updated.status == "qualified"

    def test_closed_won_sets_conversion_date(self):
        updated = self.pipeline.transition(self.lead.id, "closed_won", self.admin.id)
        assert updated.conversion_date is not None
        history = self.pipeline.status_history(self.lead.id)
        assert history[0].created_at == updated.conversion_date

    def test_closed_lost_stores_reason(self):
        updated = self.pipeline.transition(self.lead.id, "closed_lost", self.admin.id, reason="Sem orçamento")
        assert updated.rejection_reason == "Sem orçamento"

    @pytest.mark.parametrize("terminal", ["closed_won", "closed_lost"])
    def test_terminal_status_is_locked(self, terminal):
        self.pipeline.transition(self.lead.id, terminal, self.admin.id)
        with pytest.raises(TerminalStateError):
            self.pipeline.transition(self.lead.id, "contacted", self.admin.id)

        self.session.expire_all()
        assert self.pipeline.get_lead(self.lead.id).status == terminal
        assert _history_count(self.session, self.lead.id) == 1

    def test_terminal_checked_before_status_validity(self):
        self.pipeline.transition(self.lead.id, "closed_won", self.admin.id)
        with pytest.raises(TerminalStateError):
            self.pipeline.transition(self.lead.id, "bogus", self.admin.id)

    def test_invalid_status(self):
        with pytest.raises(InvalidStatusError):
            self.pipeline.transition(self.lead.id, "archived", self.admin.id)
        self.session.expire_all()
        assert self.pipeline.get_lead(self.lead.id).status == "new"
        assert _history_count(self.session, self.lead.id) == 0

    def test_unknown_lead(self):
        with pytest.raises(NotFoundError):
            self.pipeline.transition(uuid.uuid4(), "contacted", self.admin.id)

    def test_notifies_after_commit(self):
        self.pipeline.transition(self.lead.id, "contacted", self.admin.id)
        self.notifier.dispatch.assert_called_once()
        event, payload = self.notifier.dispatch.call_args[0]
        assert event == LEAD_STATUS_CHANGED
        assert payload["old_status"] == "new"
        assert payload["new_status"] == "contacted"

    def test_no_notification_on_failure(self):
        with pytest.raises(InvalidStatusError):
            self.pipeline.transition(self.lead.id, "archived", self.admin.id)
        self.notifier.dispatch.assert_not_called()

    def test_notifier_failure_does_not_undo_transition(self):
        self.notifier.dispatch.side_effect = RuntimeError("redis down")
        updated = self.pipeline.transition(self.lead.id, "contacted", self.admin.id)
        assert updated.status == "contacted"
        self.session.expire_all()
        assert self.pipeline.get_lead(self.lead.id).status == "contacted"
        assert _history_count(self.session, self.lead.id) == 1


class TestAssign:
    @pytest.fixture(autouse=True)
    def _setup(self, db_session, admin_user, sales_user, lead):
        self.session = db_session
        self.admin = admin_user
        self.seller = sales_user
        self.lead = lead
        self.notifier = MagicMock()
        self.pipeline = LeadPipeline(db_session, notifier=self.notifier)

    def test_assigns_owner(self):
        updated = self.pipeline.assign(self.lead.id, self.seller.id, self.admin.id)
        assert updated.assigned_to == self.seller.id

    def test_does_not_touch_history(self):
        self.pipeline.assign(self.lead.id, self.seller.id, self.admin.id)
        assert _history_count(self.session, self.lead.id) == 0

    def test_notification_carries_assignee_name(self):
        self.pipeline.assign(self.lead.id, self.seller.id, self.admin.id)
        event, payload = self.notifier.dispatch.call_args[0]
        assert event == LEAD_ASSIGNED
        assert payload["assignee_name"] == "Paula Vendas"

    def test_unknown_user(self):
        with pytest.raises(NotFoundError) as exc:
            self.pipeline.assign(self.lead.id, uuid.uuid4(), self.admin.id)
        assert exc.value.entity == "user"
        self.session.expire_all()
        assert self.pipeline.get_lead(self.lead.id).assigned_to is None

    def test_inactive_user_counts_as_missing(self):
        self.seller.is_active = False
        self.session.commit()
        with pytest.raises(NotFoundError):
            self.pipeline.assign(self.lead.id, self.seller.id, self.admin.id)

    def test_unknown_lead(self):
        with pytest.raises(NotFoundError) as exc:
            self.pipeline.assign(uuid.uuid4(), self.seller.id, self.admin.id)
        assert exc.value.entity == "lead"

    def test_custom_user_directory(self):
        directory = MagicMock()
        directory.exists.return_value = False
        pipeline = LeadPipeline(self.session, user_directory=directory)
        with pytest.raises(NotFoundError):
            pipeline.assign(self.lead.id, self.seller.id, self.admin.id)
        directory.exists.assert_called_once_with(self.seller.id)


class TestInteractions:
    @pytest.fixture(autouse=True)
    def _setup(self, db_session, admin_user, lead, clock):
        self.session = db_session
        self.admin = admin_user
        self.lead = lead
        self.clock = clock
        self.pipeline = LeadPipeline(db_session, clock=clock)

    def test_adds_interaction_and_bumps_counters(self):
        expected_time = self.clock.current
        interaction = self.pipeline.add_interaction(self.lead.id, "call", "Cliente pediu orçamento", self.admin.id)

        assert interaction.type == "call"
        assert interaction.created_at == expected_time
        lead = self.pipeline.get_lead(self.lead.id)
        assert lead.interaction_count == 1
        assert lead.last_interaction == expected_time

    def test_count_matches_rows(self):
        for kind in ("note", "email", "whatsapp"):
            self.pipeline.add_interaction(self.lead.id, kind, f"contato via {kind}", self.admin.id)
        rows = self.session.execute(
            select(func.count()).select_from(LeadInteraction).where(LeadInteraction.lead_id == self.lead.id)
        ).scalar_one()
        assert rows == 3
        assert self.pipeline.get_lead(self.lead.id).interaction_count == 3

    def test_listed_newest_first(self):
        self.pipeline.add_interaction(self.lead.id, "note", "primeiro", self.admin.id)
        self.pipeline.add_interaction(self.lead.id, "note", "segundo", self.admin.id)
        assert [i.content for i in self.pipeline.interactions(self.lead.id)] == ["segundo", "primeiro"]

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_rejected(self, content):
        with pytest.raises(ValidationError):
            self.pipeline.add_interaction(self.lead.id, "note", content, self.admin.id)
        self.session.expire_all()
        lead = self.pipeline.get_lead(self.lead.id)
        assert lead.interaction_count == 0
        assert lead.last_interaction is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            self.pipeline.add_interaction(self.lead.id, "sms", "oi", self.admin.id)

    def test_unknown_lead(self):
        with pytest.raises(NotFoundError):
            self.pipeline.add_interaction(uuid.uuid4(), "note", "oi", self.admin.id)

    def test_does_not_change_status(self):
        self.pipeline.add_interaction(self.lead.id, "call", "ligação", self.admin.id)
        assert self.pipeline.get_lead(self.lead.id).status == "new"
        assert _history_count(self.session, self.lead.id) == 0


class TestQueries:
    def test_get_unknown_lead(self, db_session):
        with pytest.raises(NotFoundError):
            LeadPipeline(db_session).get_lead(uuid.uuid4())

    def test_history_of_unknown_lead(self, db_session):
        with pytest.raises(NotFoundError):
            LeadPipeline(db_session).status_history(uuid.uuid4())

    def test_history_is_per_lead(self, db_session, admin_user, lead):
        other = Lead(name="Outra", email="outra@example.com", status="new")
        db_session.add(other)
        db_session.commit()

        pipeline = LeadPipeline(db_session)
        pipeline.transition(lead.id, "contacted", admin_user.id)
        pipeline.transition(other.id, "qualified", admin_user.id)

        assert [h.new_status for h in pipeline.status_history(lead.id)] == ["contacted"]
        assert [h.new_status for h in pipeline.status_history(other.id)] == ["qualified"]
        assert pipeline.status_history(other.id)[0].sequence == 1
