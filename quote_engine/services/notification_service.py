"""Notification side effects for quote lifecycle events."""
import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from quote_engine.config.settings import NOTIFY_WEBHOOK_URL, NOTIFY_WEBHOOK_TIMEOUT
from quote_engine.utils.logger import get_logger

logger = get_logger(__name__)

QUOTE_GENERATED = "quote_generated"
QUOTE_ACCEPTED = "quote_accepted"
QUOTE_REJECTED = "quote_rejected"


class QuoteNotifier(ABC):
    """Receives quote lifecycle events. Implementations must not raise."""

    @abstractmethod
    def notify(self, action: str, request_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        """Record or deliver one event."""


class LoggingNotifier(QuoteNotifier):
    """Records events in the application log."""

    def notify(self, action: str, request_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        logger.info(
            f"Quote event: {action}",
            extra={"action": action, "request_id": request_id, "details": details or {}}
        )


class WebhookNotifier(LoggingNotifier):
    """Logs events and POSTs them as JSON to a webhook URL."""

    def __init__(self, url: str, timeout: int = NOTIFY_WEBHOOK_TIMEOUT):
        self.url = url
        self.timeout = timeout

    def notify(self, action: str, request_id: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().notify(action, request_id, details)
        event = {
            "action": action,
            "request_id": request_id,
            "details": details or {},
            "sent_at": datetime.utcnow().isoformat(),
        }
        try:
            response = requests.post(
                self.url,
                headers={'Content-Type': 'application/json'},
                data=json.dumps(event),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            # Delivery failure never fails the transition that triggered it
            logger.error(
                "Quote notification delivery failed",
                extra={"action": action, "request_id": request_id, "error": str(e)}
            )


def get_default_notifier() -> QuoteNotifier:
    """WebhookNotifier when NOTIFY_WEBHOOK_URL is set, else LoggingNotifier."""
    if NOTIFY_WEBHOOK_URL:
        return WebhookNotifier(NOTIFY_WEBHOOK_URL)
    return LoggingNotifier()
