"""Service for guardian-owned job postings."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from carematch.notifier import NotificationDispatcher
from carematch.notifier.base_notifier import REVIEW_REQUEST
from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from carematch.shared.structured_logging import log_with_context

from .models import (
    JOB_STATUSES,
    MAX_HOURLY_RATE,
    MIN_HOURLY_RATE,
    STATUS_RANK,
    JobPostingPatch,
    PatientInfo,
)
from .queries import (
    FILTER_CARE_TYPE,
    FILTER_LOCATION,
    GET_MATCH_CONTACTS,
    GET_POSTING_BY_ID,
    HAS_ACCEPTED_APPLICATION,
    INSERT_POSTING,
    LIST_APPLICATIONS_FOR_POSTINGS,
    LIST_GUARDIAN_POSTINGS,
    LIST_POSTINGS_BASE,
    ORDER_NEWEST_FIRST,
    UPDATE_POSTING,
)

logger = logging.getLogger(__name__)


def _parse_date(value: Any, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)") from e


def _to_posting(row: dict[str, Any]) -> dict[str, Any]:
    """Fold the patient columns into a nested patient_info record."""
    posting = dict(row)
    posting["patient_info"] = PatientInfo(
        age=posting.pop("patient_age", None),
        gender=posting.pop("patient_gender", None),
        condition=posting.pop("patient_condition", None),
    ).to_dict()
    return posting


class PostingService:
    """Service for creating, reading and patching job postings."""

    def __init__(self, database: Database, dispatcher: NotificationDispatcher | None = None):
        """Initialize the posting service.

        Args:
            database: Database connection interface
            dispatcher: Optional dispatcher for review requests on completion
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database
        self.dispatcher = dispatcher

    @staticmethod
    def _validate_title(title: Any) -> str:
        if not isinstance(title, str) or len(title.strip()) < 5:
            raise ValidationError("Title must be at least 5 characters")
        return title.strip()

    @staticmethod
    def _validate_description(description: Any) -> str:
        if not isinstance(description, str) or len(description.strip()) < 20:
            raise ValidationError("Description must be at least 20 characters")
        return description.strip()

    @staticmethod
    def _validate_location(location: Any) -> str:
        if not isinstance(location, str) or not location.strip():
            raise ValidationError("Location is required")
        return location.strip()

    @staticmethod
    def _validate_rate(hourly_rate: Any) -> int:
        if isinstance(hourly_rate, bool) or not isinstance(hourly_rate, int):
            raise ValidationError("Hourly rate must be an integer")
        if hourly_rate < MIN_HOURLY_RATE:
            raise ValidationError(f"Hourly rate must be at least {MIN_HOURLY_RATE}")
        if hourly_rate > MAX_HOURLY_RATE:
            raise ValidationError(f"Hourly rate must be at most {MAX_HOURLY_RATE}")
        return hourly_rate

    def create_posting(
        self,
        guardian_id: str,
        title: str,
        description: str,
        location: str,
        start_date: date | str,
        hourly_rate: int,
        care_type: str | None = None,
        end_date: date | str | None = None,
        patient_info: PatientInfo | None = None,
    ) -> dict[str, Any]:
        """Create an open posting owned by ``guardian_id``.

        Raises:
            ValidationError: If any field is invalid
        """
        title = self._validate_title(title)
        description = self._validate_description(description)
        location = self._validate_location(location)
        if not start_date:
            raise ValidationError("Start date is required")
        start = _parse_date(start_date, "start_date")
        end = _parse_date(end_date, "end_date") if end_date else None
        if end and end < start:
            raise ValidationError("End date must not be before start date")
        hourly_rate = self._validate_rate(hourly_rate)
        patient = patient_info or PatientInfo()

        with self.db.get_cursor() as cur:
            cur.execute(
                INSERT_POSTING,
                (
                    guardian_id,
                    title,
                    description,
                    location,
                    care_type,
                    start,
                    end,
                    hourly_rate,
                    patient.age,
                    patient.gender,
                    patient.condition,
                ),
            )
            row = row_as_dict(cur)

        logger.info(f"Created posting {row['id']} for guardian {guardian_id}")
        return _to_posting(row)

    def get_posting(self, job_id: str) -> dict[str, Any] | None:
        with self.db.get_cursor() as cur:
            cur.execute(GET_POSTING_BY_ID, (job_id,))
            row = row_as_dict(cur)
        return _to_posting(row) if row else None

    def list_postings(
        self, status: str = "open", care_type: str | None = None, location: str | None = None
    ) -> list[dict[str, Any]]:
        """List postings by status, newest first.

        Unknown status values fall back to 'open'.
        """
        if status not in JOB_STATUSES:
            status = "open"
        query = LIST_POSTINGS_BASE
        params: list[Any] = [status]
        if care_type:
            query += FILTER_CARE_TYPE
            params.append(care_type)
        if location:
            query += FILTER_LOCATION
            params.append(f"%{location}%")
        query += ORDER_NEWEST_FIRST

        with self.db.get_cursor() as cur:
            cur.execute(query, tuple(params))
            return [_to_posting(row) for row in rows_as_dicts(cur)]

    def list_guardian_postings(self, guardian_id: str) -> list[dict[str, Any]]:
        """List a guardian's postings, each with its applications attached."""
        with self.db.get_cursor() as cur:
            cur.execute(LIST_GUARDIAN_POSTINGS, (guardian_id,))
            postings = [_to_posting(row) for row in rows_as_dicts(cur)]
            if not postings:
                return []

            cur.execute(LIST_APPLICATIONS_FOR_POSTINGS, ([p["id"] for p in postings],))
            applications = rows_as_dicts(cur)

        by_job: dict[Any, list[dict[str, Any]]] = {}
        for application in applications:
            by_job.setdefault(application["job_id"], []).append(application)
        for posting in postings:
            posting["applications"] = by_job.get(posting["id"], [])
        return postings

    def _check_status_transition(self, cur, job_id: str, current: str, target: str) -> None:
        if target not in JOB_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(JOB_STATUSES)}")
        if target == current:
            return
        if current == "completed":
            raise InvalidStateError("Completed postings cannot change status")
        if STATUS_RANK[target] < STATUS_RANK[current]:
            raise InvalidStateError(f"Cannot move posting from {current} back to {target}")
        if STATUS_RANK[target] == STATUS_RANK[current]:
            # open <-> closed toggle, only before matching
            cur.execute(HAS_ACCEPTED_APPLICATION, (job_id,))
            if cur.fetchone()[0]:
                raise InvalidStateError("Posting already has a matched caregiver")

    def update_posting(self, job_id: str, guardian_id: str, patch: JobPostingPatch) -> dict[str, Any]:
        """Apply ``patch`` to a posting owned by ``guardian_id``.

        Fields are validated and applied one by one against the stored posting,
        which is then written back as a whole.

        Raises:
            NotFoundError: If the posting does not exist or belongs to someone else
            ValidationError: If a patched field is invalid
            InvalidStateError: If the status transition is not allowed
            ConflictError: If the posting changed between read and write
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_POSTING_BY_ID, (job_id,))
            stored = row_as_dict(cur)
            if not stored or str(stored["guardian_id"]) != str(guardian_id):
                raise NotFoundError("Posting not found")

            current = {
                "title": stored["title"],
                "description": stored["description"],
                "location": stored["location"],
                "care_type": stored["care_type"],
                "start_date": stored["start_date"],
                "end_date": stored["end_date"],
                "hourly_rate": stored["hourly_rate"],
                "patient_info": PatientInfo(
                    age=stored["patient_age"],
                    gender=stored["patient_gender"],
                    condition=stored["patient_condition"],
                ),
                "status": stored["status"],
            }

            for field, value in patch.present_fields().items():
                if field == "title":
                    value = self._validate_title(value)
                elif field == "description":
                    value = self._validate_description(value)
                elif field == "location":
                    value = self._validate_location(value)
                elif field == "hourly_rate":
                    value = self._validate_rate(value)
                elif field in ("start_date", "end_date"):
                    value = _parse_date(value, field)
                elif field == "patient_info" and not isinstance(value, PatientInfo):
                    value = PatientInfo.from_dict(value)
                elif field == "status":
                    self._check_status_transition(cur, job_id, stored["status"], value)
                current[field] = value

            if current["end_date"] and current["end_date"] < current["start_date"]:
                raise ValidationError("End date must not be before start date")

            patient = current["patient_info"]
            cur.execute(
                UPDATE_POSTING,
                (
                    current["title"],
                    current["description"],
                    current["location"],
                    current["care_type"],
                    current["start_date"],
                    current["end_date"],
                    current["hourly_rate"],
                    patient.age,
                    patient.gender,
                    patient.condition,
                    current["status"],
                    job_id,
                    guardian_id,
                    stored["updated_at"],
                ),
            )
            updated = row_as_dict(cur)

        if not updated:
            raise ConflictError("Posting was modified concurrently. Reload and retry.")

        if updated["status"] != stored["status"]:
            log_with_context(
                logger,
                logging.INFO,
                f"Posting moved from {stored['status']} to {updated['status']}",
                job_id=job_id,
                user_id=guardian_id,
            )
            if updated["status"] == "completed":
                self._request_reviews(job_id)
        return _to_posting(updated)

    def _request_reviews(self, job_id: str) -> None:
        """Ask both sides of a completed match to review each other."""
        if not self.dispatcher:
            return
        try:
            with self.db.get_cursor() as cur:
                cur.execute(GET_MATCH_CONTACTS, (job_id,))
                contacts = row_as_dict(cur)
            if not contacts:
                return
            self.dispatcher.notify(
                REVIEW_REQUEST,
                contacts["guardian_phone"],
                {"job_title": contacts["job_title"], "reviewee_name": contacts["caregiver_name"]},
            )
            self.dispatcher.notify(
                REVIEW_REQUEST,
                contacts["caregiver_phone"],
                {"job_title": contacts["job_title"], "reviewee_name": contacts["guardian_name"]},
            )
        except Exception as e:
            logger.warning(f"Skipping review requests for posting {job_id}: {e}")
