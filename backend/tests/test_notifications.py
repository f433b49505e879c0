"""Tests for notification dispatch and Slack formatting."""

from unittest.mock import MagicMock, patch

from leadintel.services.notifications import (
    DELIVERY_TASK, LEAD_STATUS_CHANGED, NotificationDispatcher,
    format_assignment_notification, format_new_lead_notification, format_status_change_notification,
)
from leadintel.workers import notify


class TestNotificationDispatcher:
    def setup_method(self):
        self.queue = MagicMock()
        self.dispatcher = NotificationDispatcher(queue_factory=lambda: self.queue, enabled=True)

    def test_enqueues_delivery(self):
        assert self.dispatcher.dispatch(LEAD_STATUS_CHANGED, {"lead_id": "x"})
        args = self.queue.enqueue.call_args[0]
        assert args == (DELIVERY_TASK, LEAD_STATUS_CHANGED, {"lead_id": "x"})

    def test_disabled(self):
        dispatcher = NotificationDispatcher(queue_factory=lambda: self.queue, enabled=False)
        assert dispatcher.dispatch(LEAD_STATUS_CHANGED, {}) is False
        self.queue.enqueue.assert_not_called()

    def test_queue_failure_is_swallowed(self):
        self.queue.enqueue.side_effect = ConnectionError("redis down")
        assert self.dispatcher.dispatch(LEAD_STATUS_CHANGED, {}) is False


class TestFormatting:
    def test_status_change(self):
        text, blocks = format_status_change_notification({
            "name": "Carlos", "old_status": "qualified", "new_status": "closed_lost", "reason": "Preço",
        })
        assert text == "Lead Carlos moved from qualified to closed_lost"
        fields = [f["text"] for f in blocks[1]["fields"]]
        assert "*Reason:* Preço" in fields

    def test_assignment(self):
        text, _ = format_assignment_notification({"name": "Carlos", "assignee_name": "Paula"})
        assert text == "Lead Carlos assigned to Paula"

    def test_new_lead_location(self):
        text, blocks = format_new_lead_notification({
            "name": "Carlos", "company": "Auto Center", "cidade": "São Paulo", "estado": "SP", "pais": "Brasil",
        })
        assert text == "New lead: Carlos from Auto Center"
        assert "*Location:* São Paulo, SP, Brasil" in [f["text"] for f in blocks[1]["fields"]]

    def test_new_lead_defaults(self):
        text, blocks = format_new_lead_notification({})
        assert "Unknown" in text
        assert "No message" in blocks[2]["text"]["text"]


class TestDeliveryTask:
    def test_unknown_event(self):
        assert notify.deliver_notification("something_else", {}) is False

    def test_skips_without_webhook(self):
        with patch.object(notify, "settings") as mock_settings:
            mock_settings.slack_webhook_url = ""
            assert notify.deliver_notification(LEAD_STATUS_CHANGED, {"new_status": "contacted"}) is False
