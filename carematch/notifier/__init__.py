"""
Notification Service

Fire-and-forget notifications for lifecycle events (application received,
accepted or rejected, new chat message, review request). Delivery failures are
logged and never surface to the triggering operation.
"""

from .alimtalk_notifier import AlimtalkNotifier
from .base_notifier import NOTIFICATION_KINDS, BaseNotifier, LogNotifier
from .notification_dispatcher import NotificationDispatcher

__all__ = [
    "NOTIFICATION_KINDS",
    "AlimtalkNotifier",
    "BaseNotifier",
    "LogNotifier",
    "NotificationDispatcher",
]
