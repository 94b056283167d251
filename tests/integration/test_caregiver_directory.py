"""Integration tests for caregiver profiles, the directory and dashboards."""

import pytest

from carematch.postings import JobPostingPatch
from carematch.shared.errors import NotFoundError

pytestmark = pytest.mark.integration


def _complete_job(application_service, posting_service, guardian, caregiver, job):
    application = application_service.submit(job["id"], caregiver["id"])
    application_service.decide(application["id"], guardian["id"], "accepted")
    for status in ("in_progress", "completed"):
        posting_service.update_posting(job["id"], guardian["id"], JobPostingPatch(status=status))


class TestCaregiverProfiles:
    """Caregiver profile lifecycle."""

    def test_profile_created_with_caregiver_account(self, make_user, caregiver_service):
        caregiver = make_user("caregiver")
        guardian = make_user("guardian")

        profile = caregiver_service.get_profile(caregiver["id"])
        assert profile["is_available"] is True
        assert profile["experience_years"] == 0
        assert profile["certifications"] == []
        assert caregiver_service.get_profile(guardian["id"]) is None

    def test_update_replaces_profile(self, make_user, caregiver_service):
        caregiver = make_user("caregiver")

        caregiver_service.update_profile(
            caregiver["id"], experience_years=6, certifications=["Care worker"], location="Seoul Mapo-gu"
        )
        updated = caregiver_service.update_profile(caregiver["id"], experience_years=7)

        assert updated["experience_years"] == 7
        assert updated["certifications"] == []
        assert updated["location"] is None

    def test_guardian_cannot_hold_a_profile(self, make_user, caregiver_service):
        guardian = make_user("guardian")

        with pytest.raises(NotFoundError):
            caregiver_service.update_profile(guardian["id"], experience_years=1)


class TestDirectoryAndDashboards:
    """Public caregiver pages and role dashboards over real data."""

    def test_caregiver_page_shows_read_time_average(
        self, make_user, make_posting, application_service, posting_service, review_service, caregiver_service
    ):
        caregiver = make_user("caregiver", name="Lee")
        for rating in (5, 4, 4):
            guardian = make_user("guardian")
            job = make_posting(guardian["id"])
            _complete_job(application_service, posting_service, guardian, caregiver, job)
            review_service.submit(job["id"], guardian["id"], caregiver["id"], rating)

        page = caregiver_service.get_caregiver(caregiver["id"])

        assert page["caregiver"]["name"] == "Lee"
        assert page["caregiver"]["profile"]["is_available"] is True
        assert page["average_rating"] == 4.3
        assert page["review_count"] == 3
        assert len(page["reviews"]) == 3

    def test_directory_filters_by_location_and_availability(self, make_user, caregiver_service):
        seoul = make_user("caregiver")
        busan = make_user("caregiver")
        busy = make_user("caregiver")
        caregiver_service.update_profile(seoul["id"], location="Seoul Mapo-gu")
        caregiver_service.update_profile(busan["id"], location="Busan Haeundae-gu")
        caregiver_service.update_profile(busy["id"], location="Seoul Gangnam-gu", is_available=False)

        everyone = caregiver_service.list_caregivers()
        available_in_seoul = caregiver_service.list_caregivers(location="seoul", available_only=True)

        assert everyone["locations"] == ["Busan", "Seoul"]
        assert [c["id"] for c in available_in_seoul["caregivers"]] == [seoul["id"]]

    def test_dashboard_counts(
        self, make_user, make_posting, application_service, posting_service, dashboard_service
    ):
        guardian = make_user("guardian")
        caregivers = [make_user("caregiver") for _ in range(3)]
        open_job = make_posting(guardian["id"])
        closed_job = make_posting(guardian["id"], title="Overnight hospital care")
        for caregiver in caregivers:
            application_service.submit(open_job["id"], caregiver["id"])
        accepted = application_service.submit(closed_job["id"], caregivers[0]["id"])
        application_service.decide(accepted["id"], guardian["id"], "accepted")
        posting_service.update_posting(closed_job["id"], guardian["id"], JobPostingPatch(status="in_progress"))

        guardian_view = dashboard_service.guardian_dashboard(guardian["id"])
        caregiver_view = dashboard_service.caregiver_dashboard(caregivers[0]["id"])

        assert guardian_view["stats"] == {
            "total_jobs": 2,
            "open_jobs": 1,
            "total_applications": 4,
            "pending_applications": 3,
        }
        by_id = {job["id"]: job for job in guardian_view["jobs"]}
        assert len(by_id[open_job["id"]]["applications"]) == 3
        assert caregiver_view["stats"] == {
            "total_applications": 2,
            "pending_applications": 1,
            "accepted_applications": 1,
        }
        assert {a["job"]["title"] for a in caregiver_view["applications"]} == {
            open_job["title"],
            "Overnight hospital care",
        }
        assert caregiver_view["profile"]["user_id"] == caregivers[0]["id"]
