"""Integration tests for message ordering, cursor paging and read state."""

import threading
import uuid

import pytest

from carematch.shared.errors import AuthorizationError

pytestmark = pytest.mark.integration


@pytest.fixture
def room(make_user, chat_coordinator):
    guardian = make_user("guardian")
    caregiver = make_user("caregiver")
    created = chat_coordinator.ensure_room(caregiver["id"], guardian["id"])
    return {"id": created["id"], "guardian_id": guardian["id"], "caregiver_id": caregiver["id"]}


class TestMessagePaging:
    """Cursor paging over the message log."""

    def test_backward_pages_cover_log_without_gaps(self, room, message_log):
        """Test that walking back with before-cursors yields every message exactly once."""
        sent = [message_log.append(room["id"], room["caregiver_id"], f"message {i}")["id"] for i in range(25)]

        seen = []
        cursor = None
        while True:
            page = message_log.page(room["id"], room["guardian_id"], cursor=cursor, limit=10)
            seen = [m["id"] for m in page["messages"]] + seen
            if not page["has_more"]:
                break
            cursor = page["messages"][0]["created_at"]

        assert seen == sent

    def test_polling_after_cursor_sees_new_messages_once(self, room, message_log):
        message_log.append(room["id"], room["guardian_id"], "first")
        initial = message_log.page(room["id"], room["caregiver_id"])
        cursor = initial["messages"][-1]["created_at"]

        message_log.append(room["id"], room["guardian_id"], "second")
        message_log.append(room["id"], room["guardian_id"], "third")

        polled = message_log.page(room["id"], room["caregiver_id"], cursor=cursor, direction="after")
        assert [m["content"] for m in polled["messages"]] == ["second", "third"]

        again = message_log.page(
            room["id"], room["caregiver_id"], cursor=polled["messages"][-1]["created_at"], direction="after"
        )
        assert again["messages"] == []

    def test_concurrent_appends_have_strictly_increasing_timestamps(self, room, message_log):
        barrier = threading.Barrier(2)

        def writer(sender_id):
            barrier.wait()
            for i in range(15):
                message_log.append(room["id"], sender_id, f"{sender_id[:4]} {i}")

        threads = [
            threading.Thread(target=writer, args=(room["guardian_id"],)),
            threading.Thread(target=writer, args=(room["caregiver_id"],)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        page = message_log.page(room["id"], room["guardian_id"], direction="after", limit=100)
        timestamps = [m["created_at"] for m in page["messages"]]
        assert len(timestamps) == 30
        assert all(a < b for a, b in zip(timestamps, timestamps[1:]))

    def test_non_participant_cannot_read(self, room, message_log):
        with pytest.raises(AuthorizationError):
            message_log.page(room["id"], str(uuid.uuid4()))


class TestReadState:
    """Unread counts and the read-marking side effect of backward pages."""

    def test_before_page_marks_counterpart_messages_read(self, room, message_log, chat_coordinator):
        for i in range(3):
            message_log.append(room["id"], room["caregiver_id"], f"ping {i}")
        message_log.append(room["id"], room["guardian_id"], "my own message")

        rooms = chat_coordinator.list_rooms(room["guardian_id"], "guardian")
        assert rooms[0]["unread_count"] == 3
        assert rooms[0]["last_message"]["content"] == "my own message"

        message_log.page(room["id"], room["guardian_id"], direction="after")
        assert chat_coordinator.list_rooms(room["guardian_id"], "guardian")[0]["unread_count"] == 3

        message_log.page(room["id"], room["guardian_id"])
        assert chat_coordinator.list_rooms(room["guardian_id"], "guardian")[0]["unread_count"] == 0
        # the guardian's own message stays unread for the caregiver
        assert chat_coordinator.list_rooms(room["caregiver_id"], "caregiver")[0]["unread_count"] == 1
