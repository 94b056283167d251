"""Chat room coordination and the polled message log."""

from .chat_coordinator import ChatCoordinator
from .message_log import MAX_MESSAGE_LENGTH, MessageLog

__all__ = ["ChatCoordinator", "MAX_MESSAGE_LENGTH", "MessageLog"]
