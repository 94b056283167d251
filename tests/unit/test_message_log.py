"""Unit tests for MessageLog."""

import threading
import time
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest

from carematch.chat import MAX_MESSAGE_LENGTH, MessageLog
from carematch.chat.queries import (
    INSERT_MESSAGE,
    LOCK_ROOM_FOR_APPEND,
    MARK_OTHERS_READ,
    PAGE_AFTER_CURSOR,
    PAGE_BEFORE_CURSOR,
    PAGE_FROM_START,
    PAGE_LATEST,
    TOUCH_ROOM,
)
from carematch.notifier import NotificationDispatcher
from carematch.notifier.base_notifier import NEW_MESSAGE
from carematch.shared.errors import AuthorizationError, NotFoundError, ValidationError

ROOM_COLUMNS = ("id", "job_id", "caregiver_id", "guardian_id", "created_at", "updated_at")
LOCK_COLUMNS = ROOM_COLUMNS + ("caregiver_name", "caregiver_phone", "guardian_name", "guardian_phone")
INSERTED_COLUMNS = ("id", "room_id", "sender_id", "content", "is_read", "created_at")
MESSAGE_COLUMNS = ("id", "room_id", "sender_id", "sender_name", "content", "is_read", "created_at")
T0 = datetime(2024, 5, 1, 9, 0, 0, 1, tzinfo=UTC)


def message_rows(count, start=T0, sender="s"):
    return [
        (f"msg-{i}", "room-1", sender, "Lee", f"message {i}", False, start + timedelta(microseconds=i))
        for i in range(count)
    ]


@pytest.fixture
def message_log(mock_database, mock_dispatcher):
    """Create a MessageLog instance with mocked database."""
    return MessageLog(database=mock_database, dispatcher=mock_dispatcher)


@pytest.fixture
def locked_room(guardian_id, caregiver_id):
    return (LOCK_COLUMNS, [("room-1", "job-1", caregiver_id, guardian_id, T0, T0, "Lee", "01033334444", "Kim", "01011112222")])


@pytest.fixture
def plain_room(guardian_id, caregiver_id):
    return (ROOM_COLUMNS, [("room-1", "job-1", caregiver_id, guardian_id, T0, T0)])


class TestAppend:
    """Test cases for MessageLog.append."""

    def test_init_requires_database(self):
        """Test that MessageLog requires a database."""
        with pytest.raises(ValueError, match="Database is required"):
            MessageLog(database=None)

    @pytest.mark.parametrize(
        "content",
        ["", "   \n\t", None, "x" * (MAX_MESSAGE_LENGTH + 1), "x" * MAX_MESSAGE_LENGTH + "  "],
    )
    def test_invalid_content_is_rejected(self, message_log, mock_database, guardian_id, content):
        """Test that empty, whitespace-only and overlong content is rejected.

        Length is measured on the content as sent, surrounding whitespace included.
        """
        with pytest.raises(ValidationError):
            message_log.append("room-1", guardian_id, content)
        mock_database.transaction.assert_not_called()

    def test_append_locks_inserts_and_touches_room(
        self, message_log, script_results, mock_cursor, mock_database, mock_dispatcher, locked_room, guardian_id
    ):
        """Test the append sequence and the notification to the other participant."""
        script_results(
            locked_room,
            (INSERTED_COLUMNS, [("msg-1", "room-1", guardian_id, "Hello there", False, T0)]),
            None,
        )

        message = message_log.append("room-1", guardian_id, "  Hello there  ")

        assert message["content"] == "Hello there"
        assert message["sender_name"] == "Kim"
        mock_database.transaction.assert_called_once()
        assert [q for q, _ in mock_cursor.executed] == [LOCK_ROOM_FOR_APPEND, INSERT_MESSAGE, TOUCH_ROOM]
        assert mock_cursor.executed[2][1] == (T0, "room-1")
        mock_dispatcher.notify.assert_called_once_with(
            NEW_MESSAGE, "01033334444", {"sender_name": "Kim", "message_preview": "Hello there"}
        )

    def test_append_max_length_is_accepted(self, message_log, script_results, locked_room, caregiver_id):
        """Test that exactly MAX_MESSAGE_LENGTH characters is accepted."""
        text = "x" * MAX_MESSAGE_LENGTH
        script_results(
            locked_room,
            (INSERTED_COLUMNS, [("msg-1", "room-1", caregiver_id, text, False, T0)]),
            None,
        )

        message = message_log.append("room-1", caregiver_id, text)

        assert message["sender_name"] == "Lee"

    def test_append_does_not_wait_for_a_hanging_notifier(self, mock_database, script_results, locked_room, guardian_id):
        """Test that a stalled and failing notification gateway does not delay the append."""
        release = threading.Event()

        def hang(*args):
            release.wait(timeout=5)
            raise ConnectionError("gateway timed out")

        notifier = Mock()
        notifier.send_notification.side_effect = hang
        dispatcher = NotificationDispatcher(notifier=notifier, max_workers=1)
        message_log = MessageLog(database=mock_database, dispatcher=dispatcher)
        script_results(
            locked_room,
            (INSERTED_COLUMNS, [("msg-1", "room-1", guardian_id, "Hello", False, T0)]),
            None,
        )

        started = time.monotonic()
        message = message_log.append("room-1", guardian_id, "Hello")
        elapsed = time.monotonic() - started

        release.set()
        dispatcher.close()
        assert message["id"] == "msg-1"
        assert elapsed < 1
        notifier.send_notification.assert_called_once()

    def test_append_to_missing_room(self, message_log, script_results, guardian_id):
        script_results((LOCK_COLUMNS, []))

        with pytest.raises(NotFoundError):
            message_log.append("room-x", guardian_id, "hi")

    def test_append_by_non_participant_is_forbidden(self, message_log, script_results, mock_cursor, mock_dispatcher, locked_room):
        """Test that outsiders cannot write and nothing is inserted."""
        script_results(locked_room)

        with pytest.raises(AuthorizationError):
            message_log.append("room-1", "stranger", "hi")
        assert len(mock_cursor.executed) == 1
        mock_dispatcher.notify.assert_not_called()


class TestPage:
    """Test cases for MessageLog.page."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"direction": "sideways"},
            {"limit": 0},
            {"limit": 101},
            {"limit": True},
            {"limit": "10"},
            {"cursor": "yesterday"},
        ],
    )
    def test_invalid_arguments(self, message_log, mock_cursor, guardian_id, kwargs):
        """Test that direction, limit and cursor are validated before querying."""
        with pytest.raises(ValidationError):
            message_log.page("room-1", guardian_id, **kwargs)
        mock_cursor.execute.assert_not_called()

    def test_page_requires_participant(self, message_log, script_results, plain_room):
        script_results(plain_room)

        with pytest.raises(AuthorizationError):
            message_log.page("room-1", "stranger")

    def test_latest_page_is_ascending_and_marks_read(self, message_log, script_results, mock_cursor, plain_room, guardian_id):
        """Test that the initial page is returned oldest-first and consumes the unread signal."""
        newest_first = list(reversed(message_rows(3)))
        script_results(plain_room, (MESSAGE_COLUMNS, newest_first), None)

        page = message_log.page("room-1", guardian_id, limit=3)

        assert [m["id"] for m in page["messages"]] == ["msg-0", "msg-1", "msg-2"]
        assert page["has_more"] is True
        queries = [q for q, _ in mock_cursor.executed]
        assert queries[1] == PAGE_LATEST
        assert mock_cursor.executed[2] == (MARK_OTHERS_READ, ("room-1", guardian_id))

    def test_before_cursor_is_parsed(self, message_log, script_results, mock_cursor, plain_room, guardian_id):
        """Test that an ISO-8601 cursor reaches the query as an aware datetime."""
        script_results(plain_room, (MESSAGE_COLUMNS, message_rows(1)), None)

        page = message_log.page("room-1", guardian_id, cursor="2024-05-01T09:00:00.000005+00:00", limit=50)

        query, params = mock_cursor.executed[1]
        assert query == PAGE_BEFORE_CURSOR
        assert params == ("room-1", datetime(2024, 5, 1, 9, 0, 0, 5, tzinfo=UTC), 50)
        assert page["has_more"] is False

    def test_after_page_does_not_mark_read(self, message_log, script_results, mock_cursor, plain_room, caregiver_id):
        """Test that polling for new messages leaves read state untouched."""
        script_results(plain_room, (MESSAGE_COLUMNS, message_rows(2)))

        page = message_log.page("room-1", caregiver_id, cursor=T0, direction="after", limit=10)

        assert [m["id"] for m in page["messages"]] == ["msg-0", "msg-1"]
        queries = [q for q, _ in mock_cursor.executed]
        assert queries[1:] == [PAGE_AFTER_CURSOR]
        assert MARK_OTHERS_READ not in queries

    def test_after_without_cursor_starts_at_beginning(self, message_log, script_results, mock_cursor, plain_room, caregiver_id):
        script_results(plain_room, (MESSAGE_COLUMNS, []))

        page = message_log.page("room-1", caregiver_id, direction="after")

        assert page == {"messages": [], "has_more": False}
        assert mock_cursor.executed[1][0] == PAGE_FROM_START

    def test_page_size_bound_is_configurable(self, mock_database, guardian_id):
        log = MessageLog(database=mock_database, max_page_size=20)

        with pytest.raises(ValidationError, match="20"):
            log.page("room-1", guardian_id, limit=21)
