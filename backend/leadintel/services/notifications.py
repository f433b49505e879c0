"""Notification service - fire-and-forget dispatch + Slack delivery.

Pipeline operations hand events to NotificationDispatcher after their own
commit. Delivery happens later on the notifications queue, so a Slack or Redis
outage can never undo a lead change.
"""

import httpx
import structlog
from rq import Retry

from leadintel.config import settings
from leadintel.queues import get_queue

logger = structlog.get_logger()

NOTIFICATIONS_QUEUE = "notifications"
DELIVERY_TASK = "leadintel.workers.notify.deliver_notification"

LEAD_CREATED = "lead_created"
LEAD_STATUS_CHANGED = "lead_status_changed"
LEAD_ASSIGNED = "lead_assigned"


class NotificationDispatcher:
    """Enqueues notification events; never raises into the caller."""

    def __init__(self, queue_factory=None, enabled: bool | None = None):
        self._queue_factory = queue_factory or (lambda: get_queue(NOTIFICATIONS_QUEUE))
        self.enabled = settings.notifications_enabled if enabled is None else enabled

    def dispatch(self, event: str, payload: dict) -> bool:
        if not self.enabled:
            logger.info("notification_skipped_disabled", notification=event)
            return False
        try:
            self._queue_factory().enqueue(
                DELIVERY_TASK,
                event, payload,
                job_timeout=60,
                retry=Retry(max=3, interval=[10, 30, 60]),
            )
        except Exception as e:
            logger.error("notification_enqueue_failed", notification=event, error=str(e))
            return False
        return True


def get_dispatcher() -> NotificationDispatcher:
    """FastAPI dependency; overridden in tests."""
    return NotificationDispatcher()


async def send_slack_notification(
    webhook_url: str,
    text: str,
    blocks: list | None = None,
) -> bool:
    """Send a notification via Slack incoming webhook."""
    if not webhook_url:
        logger.info("slack_notification_skipped_no_webhook")
        return False

    payload: dict = {"text": text}
    if blocks:
        payload["blocks"] = blocks

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.post(webhook_url, json=payload)
            resp.raise_for_status()
        logger.info("slack_notification_sent", text=text[:100])
        return True
    except httpx.HTTPError as e:
        logger.error("slack_notification_failed", error=str(e))
        return False


def _fields_section(fields: dict) -> dict:
    return {
        "type": "section",
        "fields": [{"type": "mrkdwn", "text": f"*{label}:* {value}"} for label, value in fields.items()],
    }


def format_new_lead_notification(lead_data: dict) -> tuple[str, list]:
    """Format a new inbound lead for Slack."""
    name = lead_data.get("name") or "Unknown"
    location = ", ".join(filter(None, [lead_data.get("cidade"), lead_data.get("estado"), lead_data.get("pais")]))
    text = f"New lead: {name} from {lead_data.get('company') or 'Unknown'}"
    blocks = [
        {"type": "header", "text": {"type": "plain_text", "text": "New Lead"}},
        _fields_section({
            "Name": name,
            "Company": lead_data.get("company") or "Unknown",
            "Email": lead_data.get("email") or "Unknown",
            "Location": location or "Unknown",
        }),
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*Message:* {(lead_data.get('message') or 'No message')[:200]}"},
        },
    ]
    return text, blocks


def format_status_change_notification(data: dict) -> tuple[str, list]:
    old_status = data.get("old_status") or "none"
    text = f"Lead {data.get('name') or data.get('lead_id')} moved from {old_status} to {data.get('new_status')}"
    fields = {"From": old_status, "To": data.get("new_status")}
    if data.get("reason"):
        fields["Reason"] = data["reason"]
    blocks = [
        {"type": "header", "text": {"type": "plain_text", "text": "Lead Status Changed"}},
        _fields_section(fields),
    ]
    return text, blocks


def format_assignment_notification(data: dict) -> tuple[str, list]:
    assignee = data.get("assignee_name") or data.get("user_id")
    text = f"Lead {data.get('name') or data.get('lead_id')} assigned to {assignee}"
    blocks = [
        {"type": "header", "text": {"type": "plain_text", "text": "Lead Assigned"}},
        _fields_section({"Lead": data.get("name") or data.get("lead_id"), "Assigned to": assignee}),
    ]
    return text, blocks


FORMATTERS = {
    LEAD_CREATED: format_new_lead_notification,
    LEAD_STATUS_CHANGED: format_status_change_notification,
    LEAD_ASSIGNED: format_assignment_notification,
}
