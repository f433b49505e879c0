"""Notification delivery task, consumed from the notifications queue."""

import structlog

from leadintel.config import settings
from leadintel.services.notifications import FORMATTERS, send_slack_notification
from leadintel.workers.base import run_async

logger = structlog.get_logger()


def deliver_notification(event: str, payload: dict) -> bool:
    formatter = FORMATTERS.get(event)
    if formatter is None:
        logger.warning("notification_unknown_event", notification=event)
        return False
    text, blocks = formatter(payload)
    return run_async(send_slack_notification(settings.slack_webhook_url, text, blocks=blocks))
