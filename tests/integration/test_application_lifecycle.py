"""Integration tests for applications, chat rooms and reviews against PostgreSQL."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from carematch.postings import JobPostingPatch
from carematch.shared.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateApplicationError,
    InvalidStateError,
    NotFoundError,
    TransientError,
)

pytestmark = pytest.mark.integration


def _run_concurrently(count, fn):
    """Run ``fn(i)`` on ``count`` threads released together; return results or exceptions."""
    barrier = threading.Barrier(count)

    def worker(i):
        barrier.wait()
        try:
            return fn(i)
        except Exception as e:
            return e

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(worker, range(count)))


class TestApplicationFlow:
    """End-to-end application state machine behaviour."""

    def test_accept_opens_chat_and_completion_enables_reviews(
        self,
        make_user,
        make_posting,
        application_service,
        chat_coordinator,
        message_log,
        posting_service,
        review_service,
    ):
        """Test the whole path from application to mutual reviews."""
        guardian = make_user("guardian", name="Kim")
        caregiver = make_user("caregiver", name="Lee")
        job = make_posting(guardian["id"])

        application = application_service.submit(job["id"], caregiver["id"], message="Happy to help")
        assert application["status"] == "pending"

        decided = application_service.decide(application["id"], guardian["id"], "accepted")
        assert decided["status"] == "accepted"
        room = decided["room"]

        rooms = chat_coordinator.list_rooms(caregiver["id"], "caregiver")
        assert [r["id"] for r in rooms] == [room["id"]]
        assert rooms[0]["counterpart"]["name"] == "Kim"
        assert rooms[0]["last_message"] is None

        message_log.append(room["id"], caregiver["id"], "Hello, see you Monday")
        page = message_log.page(room["id"], guardian["id"])
        assert [m["content"] for m in page["messages"]] == ["Hello, see you Monday"]
        assert page["has_more"] is False

        for status in ("in_progress", "completed"):
            posting_service.update_posting(job["id"], guardian["id"], JobPostingPatch(status=status))

        eligible = review_service.eligible_reviewee(job["id"], guardian["id"])
        assert eligible["reviewee"]["id"] == caregiver["id"]
        assert eligible["already_reviewed"] is False

        review_service.submit(job["id"], guardian["id"], caregiver["id"], 5, comment="Wonderful")
        review_service.submit(job["id"], caregiver["id"], guardian["id"], 4)

        with pytest.raises(ConflictError):
            review_service.submit(job["id"], guardian["id"], caregiver["id"], 3)

        assert review_service.eligible_reviewee(job["id"], guardian["id"])["already_reviewed"] is True
        received = review_service.list_reviews(reviewee_id=caregiver["id"])
        assert received["total_count"] == 1
        assert received["average_rating"] == 5.0
        assert review_service.list_reviews(job_id=job["id"])["average_rating"] == 4.5

    def test_duplicate_application_conflicts(self, make_user, make_posting, application_service):
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        job = make_posting(guardian["id"])

        application_service.submit(job["id"], caregiver["id"])
        with pytest.raises(DuplicateApplicationError):
            application_service.submit(job["id"], caregiver["id"])

    def test_closed_posting_refuses_applications(self, make_user, make_posting, application_service, posting_service):
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        job = make_posting(guardian["id"])
        posting_service.update_posting(job["id"], guardian["id"], JobPostingPatch(status="closed"))

        with pytest.raises(InvalidStateError):
            application_service.submit(job["id"], caregiver["id"])

    def test_decisions_are_terminal_and_owner_only(self, make_user, make_posting, application_service):
        guardian = make_user("guardian")
        other_guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        job = make_posting(guardian["id"])
        application = application_service.submit(job["id"], caregiver["id"])

        with pytest.raises(AuthorizationError):
            application_service.decide(application["id"], other_guardian["id"], "accepted")

        application_service.decide(application["id"], guardian["id"], "rejected")
        with pytest.raises(InvalidStateError):
            application_service.decide(application["id"], guardian["id"], "accepted")

    def test_withdraw_twice(self, make_user, make_posting, application_service):
        """Test that the second withdrawal of the same application is NotFound."""
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        job = make_posting(guardian["id"])
        application = application_service.submit(job["id"], caregiver["id"])

        application_service.withdraw(application["id"], caregiver["id"])
        with pytest.raises(NotFoundError):
            application_service.withdraw(application["id"], caregiver["id"])

        # withdrawn row is gone, so the caregiver may apply again
        assert application_service.submit(job["id"], caregiver["id"])["status"] == "pending"

    def test_second_acceptance_is_refused(self, make_user, make_posting, application_service, chat_coordinator):
        """Test that a job has at most one accepted application and the first room is kept."""
        guardian = make_user("guardian")
        first = make_user("caregiver")
        second = make_user("caregiver")
        job = make_posting(guardian["id"])
        app_one = application_service.submit(job["id"], first["id"])
        app_two = application_service.submit(job["id"], second["id"])

        application_service.decide(app_one["id"], guardian["id"], "accepted")
        with pytest.raises(InvalidStateError):
            application_service.decide(app_two["id"], guardian["id"], "accepted")

        assert application_service.get_application(app_two["id"], guardian["id"])["status"] == "pending"
        rooms = chat_coordinator.list_rooms(guardian["id"], "guardian")
        assert [r["counterpart"]["id"] for r in rooms] == [first["id"]]

    def test_failed_room_creation_rolls_back_acceptance(
        self, make_user, make_posting, application_service, chat_coordinator, database, monkeypatch
    ):
        """Test that an acceptance whose room insert fails leaves the application pending and no room."""
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        job = make_posting(guardian["id"])
        application = application_service.submit(job["id"], caregiver["id"])
        ensure_room = chat_coordinator.ensure_room

        def ensure_room_then_fail(*args, **kwargs):
            ensure_room(*args, **kwargs)
            raise TransientError("Database temporarily unavailable. Please retry.")

        monkeypatch.setattr(chat_coordinator, "ensure_room", ensure_room_then_fail)

        with pytest.raises(TransientError):
            application_service.decide(application["id"], guardian["id"], "accepted")

        assert application_service.get_application(application["id"], guardian["id"])["status"] == "pending"
        with database.get_cursor() as cur:
            cur.execute(
                "SELECT COUNT(*) FROM chat_rooms WHERE caregiver_id = %s AND guardian_id = %s",
                (caregiver["id"], guardian["id"]),
            )
            assert cur.fetchone()[0] == 0

        # the same decision succeeds once room creation works again
        monkeypatch.undo()
        decided = application_service.decide(application["id"], guardian["id"], "accepted")
        assert decided["status"] == "accepted"
        assert decided["room"]["caregiver_id"] == caregiver["id"]

    def test_concurrent_acceptances_yield_one_winner(self, make_user, make_posting, application_service, chat_coordinator):
        guardian = make_user("guardian")
        caregivers = [make_user("caregiver") for _ in range(4)]
        job = make_posting(guardian["id"])
        applications = [application_service.submit(job["id"], c["id"]) for c in caregivers]

        results = _run_concurrently(
            len(applications),
            lambda i: application_service.decide(applications[i]["id"], guardian["id"], "accepted"),
        )

        winners = [r for r in results if isinstance(r, dict)]
        assert len(winners) == 1
        assert all(isinstance(r, InvalidStateError) for r in results if not isinstance(r, dict))
        assert len(chat_coordinator.list_rooms(guardian["id"], "guardian")) == 1


class TestChatRooms:
    """Chat room uniqueness."""

    def test_concurrent_ensure_room_creates_one_room(self, make_user, chat_coordinator):
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")

        results = _run_concurrently(8, lambda i: chat_coordinator.ensure_room(caregiver["id"], guardian["id"]))

        assert all(isinstance(r, dict) for r in results)
        assert len({r["id"] for r in results}) == 1

    def test_room_is_reused_across_jobs(self, make_user, make_posting, application_service):
        """Test that a pair matched twice keeps a single room."""
        guardian = make_user("guardian")
        caregiver = make_user("caregiver")
        rooms = []
        for _ in range(2):
            job = make_posting(guardian["id"])
            application = application_service.submit(job["id"], caregiver["id"])
            rooms.append(application_service.decide(application["id"], guardian["id"], "accepted")["room"])

        assert rooms[0]["id"] == rooms[1]["id"]
