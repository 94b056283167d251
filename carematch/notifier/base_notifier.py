"""
Base Notification Service

Abstract base class for notification channels (Alimtalk, SMS, etc.).
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)

APPLICATION_RECEIVED = "application_received"
APPLICATION_ACCEPTED = "application_accepted"
APPLICATION_REJECTED = "application_rejected"
NEW_MESSAGE = "new_message"
REVIEW_REQUEST = "review_request"

NOTIFICATION_KINDS = (
    APPLICATION_RECEIVED,
    APPLICATION_ACCEPTED,
    APPLICATION_REJECTED,
    NEW_MESSAGE,
    REVIEW_REQUEST,
)

MOBILE_NUMBER = re.compile(r"^01[0-9]{8,9}$")


class BaseNotifier(ABC):
    """
    Abstract base class for notification channels.

    Subclasses implement send_notification() to handle the actual delivery
    mechanism.
    """

    @staticmethod
    def normalize_phone(phone: str | None) -> str | None:
        """Strip dashes and spaces; return None unless it is a mobile number."""
        if not phone:
            return None
        normalized = phone.replace("-", "").replace(" ", "")
        return normalized if MOBILE_NUMBER.match(normalized) else None

    @abstractmethod
    def send_notification(self, recipient: str, kind: str, template_vars: dict[str, Any]) -> bool:
        """
        Send a notification to a recipient.

        Args:
            recipient: Recipient contact (mobile number)
            kind: One of NOTIFICATION_KINDS, used as the message template id
            template_vars: Values substituted into the template

        Returns:
            True if the notification was accepted for delivery, False otherwise
        """


class LogNotifier(BaseNotifier):
    """Development notifier that only logs what it would send."""

    def send_notification(self, recipient: str, kind: str, template_vars: dict[str, Any]) -> bool:
        logger.info(f"[notify] Would send {kind} to {recipient}: {template_vars}")
        return True
