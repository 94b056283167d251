"""
Notification Dispatcher

Fire-and-forget entry point used by the lifecycle services. Works with any
BaseNotifier implementation. Delivery runs on a small worker pool so a slow
gateway never holds up the request that triggered the notification.
"""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any

from .base_notifier import NOTIFICATION_KINDS, BaseNotifier

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 50
DEFAULT_MAX_WORKERS = 4


class NotificationDispatcher:
    """
    Dispatches notifications without ever failing or blocking the caller.

    ``notify`` hands the message to a background worker and returns at once.
    Every error from the underlying notifier is logged and converted into a
    False delivery result.
    """

    def __init__(self, notifier: BaseNotifier, max_workers: int = DEFAULT_MAX_WORKERS):
        """
        Initialize notification dispatcher.

        Args:
            notifier: BaseNotifier implementation (e.g., AlimtalkNotifier)
            max_workers: Number of delivery threads
        """
        if not notifier:
            raise ValueError("Notifier is required")
        self.notifier = notifier
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="carematch-notify"
        )

    def notify(
        self, kind: str, recipient_contact: str | None, template_vars: dict[str, Any]
    ) -> concurrent.futures.Future | None:
        """
        Schedule a notification, best effort.

        Args:
            kind: One of NOTIFICATION_KINDS
            recipient_contact: Recipient mobile number; None skips delivery
            template_vars: Template values

        Returns:
            Future resolving to the delivery result, or None if the
            notification was skipped
        """
        if kind not in NOTIFICATION_KINDS:
            logger.warning(f"Unknown notification kind {kind!r}; not sent")
            return None
        if not recipient_contact:
            logger.info(f"No contact for {kind} notification; skipped")
            return None

        if "message_preview" in template_vars:
            template_vars = {
                **template_vars,
                "message_preview": str(template_vars["message_preview"])[:MESSAGE_PREVIEW_LENGTH],
            }

        try:
            return self._executor.submit(self.deliver, kind, recipient_contact, template_vars)
        except RuntimeError as e:
            # Raised by the executor after close()
            logger.warning(f"Notification {kind} dropped: {e}")
            return None

    def deliver(self, kind: str, recipient_contact: str, template_vars: dict[str, Any]) -> bool:
        """Send one notification on the current thread. Never raises."""
        try:
            sent = self.notifier.send_notification(recipient_contact, kind, template_vars)
        except Exception as e:
            logger.warning(f"Notification {kind} failed: {e}", exc_info=True)
            return False

        if not sent:
            logger.warning(f"Notification {kind} was not delivered")
        return bool(sent)

    def close(self, wait: bool = True) -> None:
        """Stop accepting notifications and, by default, flush pending ones."""
        self._executor.shutdown(wait=wait)
