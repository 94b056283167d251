"""
Message Log

Append-only, per-room message log. Clients poll it: an initial ``before`` page
loads history (and consumes the unread signal), then repeated ``after`` pages
fetch only what arrived since the newest timestamp they have seen.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from carematch.notifier import NotificationDispatcher
from carematch.notifier.base_notifier import NEW_MESSAGE
from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import AuthorizationError, NotFoundError, ValidationError
from carematch.shared.structured_logging import get_structured_logger
from carematch.shared.validators import parse_timestamp

from .chat_coordinator import is_participant
from .queries import (
    GET_ROOM_BY_ID,
    INSERT_MESSAGE,
    LOCK_ROOM_FOR_APPEND,
    MARK_OTHERS_READ,
    PAGE_AFTER_CURSOR,
    PAGE_BEFORE_CURSOR,
    PAGE_FROM_START,
    PAGE_LATEST,
    TOUCH_ROOM,
)

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
DIRECTIONS = ("before", "after")


class MessageLog:
    """Appends and pages chat messages."""

    def __init__(
        self,
        database: Database,
        dispatcher: NotificationDispatcher | None = None,
        max_page_size: int = MAX_PAGE_SIZE,
    ):
        """
        Initialize the message log.

        Args:
            database: Database connection interface
            dispatcher: Optional notification dispatcher for new-message alerts
            max_page_size: Upper bound accepted for ``limit``
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database
        self.dispatcher = dispatcher
        self.max_page_size = max_page_size

    def append(self, room_id: str, sender_id: str, content: str) -> dict[str, Any]:
        """
        Append a message to a room.

        The room row is locked for the duration of the transaction, which
        serializes appends per room and keeps timestamps strictly increasing.

        Args:
            room_id: Room ID
            sender_id: Caller's user ID; must be a participant
            content: Message text; at most 1000 characters as sent, stored stripped

        Returns:
            The created message dictionary

        Raises:
            ValidationError: If content is empty or too long
            NotFoundError: If the room does not exist
            AuthorizationError: If the sender is not a participant
        """
        text = content.strip() if isinstance(content, str) else ""
        if not text:
            raise ValidationError("Message content is required")
        if len(content) > MAX_MESSAGE_LENGTH:
            raise ValidationError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")

        log = get_structured_logger(__name__, room_id=room_id, user_id=sender_id)

        with self.db.transaction() as cur:
            cur.execute(LOCK_ROOM_FOR_APPEND, (room_id,))
            room = row_as_dict(cur)
            if not room:
                raise NotFoundError("Chat room not found")
            if not is_participant(room, sender_id):
                raise AuthorizationError("You are not a participant of this chat room")

            cur.execute(INSERT_MESSAGE, (room_id, sender_id, text, room_id))
            message = row_as_dict(cur)
            cur.execute(TOUCH_ROOM, (message["created_at"], room_id))

        log.info(f"Appended message {message['id']}")

        sender_is_guardian = str(sender_id) == str(room["guardian_id"])
        message["sender_name"] = room["guardian_name"] if sender_is_guardian else room["caregiver_name"]
        if self.dispatcher:
            recipient_phone = room["caregiver_phone"] if sender_is_guardian else room["guardian_phone"]
            self.dispatcher.notify(
                NEW_MESSAGE,
                recipient_phone,
                {"sender_name": message["sender_name"], "message_preview": text},
            )
        return message

    def page(
        self,
        room_id: str,
        user_id: str,
        cursor: str | datetime | None = None,
        direction: str = "before",
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> dict[str, Any]:
        """
        Fetch one page of a room's log, in ascending order.

        ``before`` returns the ``limit`` most recent messages strictly older
        than the cursor (or the newest messages without a cursor) and marks the
        other participant's unread messages in the room as read. ``after``
        returns the oldest ``limit`` messages strictly newer than the cursor (or
        from the start without a cursor) and leaves read state untouched.

        Args:
            room_id: Room ID
            user_id: Caller's user ID; must be a participant
            cursor: Timestamp boundary (ISO-8601 string or datetime)
            direction: 'before' or 'after'
            limit: Page size, 1 to max_page_size

        Returns:
            {"messages": [...], "has_more": bool}. has_more is True when the
            page is full.

        Raises:
            ValidationError: If direction, cursor or limit is invalid
            NotFoundError: If the room does not exist
            AuthorizationError: If the caller is not a participant
        """
        if direction not in DIRECTIONS:
            raise ValidationError("Direction must be 'before' or 'after'")
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= self.max_page_size:
            raise ValidationError(f"Limit must be between 1 and {self.max_page_size}")
        if isinstance(cursor, str):
            cursor = parse_timestamp(cursor, direction)

        with self.db.get_cursor() as cur:
            cur.execute(GET_ROOM_BY_ID, (room_id,))
            room = row_as_dict(cur)
            if not room:
                raise NotFoundError("Chat room not found")
            if not is_participant(room, user_id):
                raise AuthorizationError("You are not a participant of this chat room")

            if direction == "before":
                if cursor is None:
                    cur.execute(PAGE_LATEST, (room_id, limit))
                else:
                    cur.execute(PAGE_BEFORE_CURSOR, (room_id, cursor, limit))
                messages = list(reversed(rows_as_dicts(cur)))
                cur.execute(MARK_OTHERS_READ, (room_id, user_id))
                if cur.rowcount:
                    logger.debug(f"Marked {cur.rowcount} message(s) read in room {room_id}")
            else:
                if cursor is None:
                    cur.execute(PAGE_FROM_START, (room_id, limit))
                else:
                    cur.execute(PAGE_AFTER_CURSOR, (room_id, cursor, limit))
                messages = rows_as_dicts(cur)

        return {"messages": messages, "has_more": len(messages) == limit}
