"""
Chat Coordinator

Materializes exactly one chat room per matched (caregiver, guardian) pair and
lists rooms with their last message and unread count.
"""

from __future__ import annotations

import logging
from typing import Any

from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import AuthorizationError, NotFoundError, ValidationError
from carematch.shared.structured_logging import get_structured_logger

from .queries import (
    GET_ROOM_BY_ID,
    GET_ROOM_BY_PAIR,
    INSERT_ROOM_IF_ABSENT,
    LIST_ROOMS_FOR_CAREGIVER,
    LIST_ROOMS_FOR_GUARDIAN,
)

logger = logging.getLogger(__name__)

LAST_MESSAGE_PREFIX = "last_message_"


def is_participant(room: dict[str, Any], user_id: str) -> bool:
    return str(user_id) in (str(room["caregiver_id"]), str(room["guardian_id"]))


def _annotate_room(row: dict[str, Any], role: str) -> dict[str, Any]:
    """Nest last-message columns and expose the counterpart for the caller's role."""
    room: dict[str, Any] = {}
    last_message: dict[str, Any] = {}
    for key, value in row.items():
        if key.startswith(LAST_MESSAGE_PREFIX):
            last_message[key[len(LAST_MESSAGE_PREFIX):]] = value
        else:
            room[key] = value

    room["last_message"] = last_message if last_message.get("id") is not None else None
    room["unread_count"] = int(room.get("unread_count") or 0)
    other = "caregiver" if role == "guardian" else "guardian"
    room["counterpart"] = {
        "id": room[f"{other}_id"],
        "name": room.get(f"{other}_name"),
        "avatar_url": room.get(f"{other}_avatar_url"),
    }
    room["job"] = {
        "id": room.pop("job_id"),
        "title": room.pop("job_title", None),
        "status": room.pop("job_status", None),
    }
    return room


class ChatCoordinator:
    """Creates and looks up chat rooms."""

    def __init__(self, database: Database):
        """
        Initialize the chat coordinator.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def ensure_room(
        self,
        caregiver_id: str,
        guardian_id: str,
        job_id: str | None = None,
        cur=None,
    ) -> dict[str, Any]:
        """
        Return the room for the pair, creating it if absent.

        Safe under concurrent calls: the insert is conditional on the
        (caregiver_id, guardian_id) uniqueness constraint, so a lost race is a
        no-op followed by a read of the winner's row.

        Args:
            caregiver_id: Caregiver side of the pair
            guardian_id: Guardian side of the pair
            job_id: Posting that matched the pair; recorded only on creation
            cur: Cursor of an enclosing transaction. When given, the room is
                created inside that transaction.

        Returns:
            Room dictionary
        """
        if cur is not None:
            return self._ensure_room(cur, caregiver_id, guardian_id, job_id)
        with self.db.transaction() as own_cur:
            return self._ensure_room(own_cur, caregiver_id, guardian_id, job_id)

    def _ensure_room(self, cur, caregiver_id: str, guardian_id: str, job_id: str | None) -> dict[str, Any]:
        log = get_structured_logger(__name__, caregiver_id=caregiver_id, guardian_id=guardian_id)

        cur.execute(INSERT_ROOM_IF_ABSENT, (job_id, caregiver_id, guardian_id))
        room = row_as_dict(cur)
        if room:
            log.info(f"Created chat room {room['id']}")
            return room

        cur.execute(GET_ROOM_BY_PAIR, (caregiver_id, guardian_id))
        room = row_as_dict(cur)
        if not room:
            # conflicting row disappeared between insert and read
            raise NotFoundError("Chat room not found")
        log.debug(f"Reusing chat room {room['id']}")
        return room

    def get_room(self, room_id: str, user_id: str) -> dict[str, Any]:
        """
        Get a room the caller participates in.

        Raises:
            NotFoundError: If the room does not exist
            AuthorizationError: If the caller is not a participant
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_ROOM_BY_ID, (room_id,))
            room = row_as_dict(cur)

        if not room:
            raise NotFoundError("Chat room not found")
        if not is_participant(room, user_id):
            raise AuthorizationError("You are not a participant of this chat room")
        return room

    def list_rooms(self, user_id: str, role: str) -> list[dict[str, Any]]:
        """
        List rooms for a participant, most recently active first.

        Each room carries its last message and the number of unread messages
        sent by the other participant. Both are computed at read time.

        Args:
            user_id: Caller's user ID
            role: 'guardian' or 'caregiver'
        """
        if role == "guardian":
            query = LIST_ROOMS_FOR_GUARDIAN
        elif role == "caregiver":
            query = LIST_ROOMS_FOR_CAREGIVER
        else:
            raise ValidationError("Role must be caregiver or guardian")

        with self.db.get_cursor() as cur:
            cur.execute(query, (user_id, user_id))
            rows = rows_as_dicts(cur)

        return [_annotate_room(row, role) for row in rows]
