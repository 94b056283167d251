"""
Application State Machine

    pending -> accepted   (owning guardian)
    pending -> rejected   (owning guardian)
    pending -> withdrawn  (applicant; the row is deleted)

accepted and rejected are terminal. Every transition is one conditional
statement, so two concurrent decisions on the same application cannot both win.
"""

from __future__ import annotations

import logging
from typing import Any

from carematch.chat import ChatCoordinator
from carematch.notifier import NotificationDispatcher
from carematch.notifier.base_notifier import (
    APPLICATION_ACCEPTED,
    APPLICATION_RECEIVED,
    APPLICATION_REJECTED,
)
from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import (
    AuthorizationError,
    ConflictError,
    DuplicateApplicationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from carematch.shared.structured_logging import get_structured_logger

from .queries import (
    DECIDE_APPLICATION,
    GET_APPLICATION_CONTACTS,
    GET_APPLICATION_WITH_OWNER,
    GET_POSTING_STATUS,
    INSERT_APPLICATION_IF_OPEN,
    LIST_FOR_CAREGIVER,
    LIST_FOR_GUARDIAN,
    WITHDRAW_APPLICATION,
)

logger = logging.getLogger(__name__)

DECISIONS = ("accepted", "rejected")

SINGLE_ACCEPTED_CONSTRAINT = "applications_single_accepted_idx"

MAX_APPLICATION_MESSAGE_LENGTH = 2000


class ApplicationService:
    """Service for caregiver applications to job postings."""

    def __init__(
        self,
        database: Database,
        chat_coordinator: ChatCoordinator,
        dispatcher: NotificationDispatcher | None = None,
    ):
        """Initialize the application service.

        Args:
            database: Database connection interface
            chat_coordinator: Creates the chat room when an application is accepted
            dispatcher: Optional notification dispatcher
        """
        if not database:
            raise ValueError("Database is required")
        if not chat_coordinator:
            raise ValueError("Chat coordinator is required")
        self.db = database
        self.chat = chat_coordinator
        self.dispatcher = dispatcher

    def submit(self, job_id: str, caregiver_id: str, message: str | None = None) -> dict[str, Any]:
        """Submit a pending application to an open posting.

        Args:
            job_id: Posting ID
            caregiver_id: Applying caregiver's user ID
            message: Optional free-text message to the guardian

        Returns:
            The created application dictionary

        Raises:
            ValidationError: If the message is too long
            NotFoundError: If the posting does not exist
            InvalidStateError: If the posting is not open
            DuplicateApplicationError: If the caregiver already applied to this posting
        """
        if message is not None and not isinstance(message, str):
            raise ValidationError("Message must be text")
        message = (message or "").strip() or None
        if message and len(message) > MAX_APPLICATION_MESSAGE_LENGTH:
            raise ValidationError(
                f"Message must be at most {MAX_APPLICATION_MESSAGE_LENGTH} characters"
            )

        with self.db.get_cursor() as cur:
            cur.execute(INSERT_APPLICATION_IF_OPEN, (caregiver_id, message, job_id))
            application = row_as_dict(cur)

            if not application:
                cur.execute(GET_POSTING_STATUS, (job_id,))
                posting = row_as_dict(cur)
                if not posting:
                    raise NotFoundError("Job posting not found")
                if posting["status"] != "open":
                    raise InvalidStateError("This job posting is no longer accepting applications")
                raise DuplicateApplicationError("You have already applied to this job posting")

        log = get_structured_logger(__name__, application_id=application["id"], job_id=job_id)
        log.info(f"Caregiver {caregiver_id} applied")
        self._notify_guardian(application["id"])
        return application

    def decide(self, application_id: str, guardian_id: str, decision: str) -> dict[str, Any]:
        """Accept or reject a pending application.

        Acceptance and chat-room creation commit together; if either fails the
        application stays pending.

        Args:
            application_id: Application ID
            guardian_id: Caller's user ID; must own the posting
            decision: 'accepted' or 'rejected'

        Returns:
            The updated application dictionary (with ``room`` on acceptance)

        Raises:
            ValidationError: If decision is not 'accepted' or 'rejected'
            NotFoundError: If the application does not exist
            AuthorizationError: If the caller does not own the posting
            InvalidStateError: If the application is not pending, or the
                posting already has an accepted application
        """
        if decision not in DECISIONS:
            raise ValidationError(f"Status must be one of: {', '.join(DECISIONS)}")

        log = get_structured_logger(__name__, application_id=application_id, user_id=guardian_id)

        try:
            with self.db.transaction() as cur:
                cur.execute(DECIDE_APPLICATION, (decision, application_id, guardian_id))
                application = row_as_dict(cur)

                if not application:
                    self._raise_decide_failure(cur, application_id, guardian_id)

                if decision == "accepted":
                    room = self.chat.ensure_room(
                        caregiver_id=application["caregiver_id"],
                        guardian_id=application["guardian_id"],
                        job_id=application["job_id"],
                        cur=cur,
                    )
                    application["room"] = room
        except ConflictError as e:
            if e.constraint == SINGLE_ACCEPTED_CONSTRAINT:
                raise InvalidStateError(
                    "This job posting already has an accepted application"
                ) from e
            raise

        log.info(f"Application {decision}")
        self._notify_caregiver(application_id, decision)
        return application

    @staticmethod
    def _raise_decide_failure(cur, application_id: str, guardian_id: str) -> None:
        cur.execute(GET_APPLICATION_WITH_OWNER, (application_id,))
        existing = row_as_dict(cur)
        if not existing:
            raise NotFoundError("Application not found")
        if str(existing["guardian_id"]) != str(guardian_id):
            raise AuthorizationError("You can only decide applications to your own job postings")
        raise InvalidStateError(f"Application is already {existing['status']}")

    def withdraw(self, application_id: str, caregiver_id: str) -> None:
        """Withdraw (delete) a pending application.

        Raises:
            NotFoundError: If the application does not exist (or was already withdrawn)
            AuthorizationError: If the caller is not the applicant
            InvalidStateError: If the application is no longer pending
        """
        with self.db.get_cursor() as cur:
            cur.execute(WITHDRAW_APPLICATION, (application_id, caregiver_id))
            if cur.fetchone():
                logger.info(f"Withdrew application {application_id} by caregiver {caregiver_id}")
                return

            cur.execute(GET_APPLICATION_WITH_OWNER, (application_id,))
            existing = row_as_dict(cur)

        if not existing:
            raise NotFoundError("Application not found")
        if str(existing["caregiver_id"]) != str(caregiver_id):
            raise AuthorizationError("You can only withdraw your own applications")
        raise InvalidStateError("Only pending applications can be withdrawn")

    def get_application(self, application_id: str, user_id: str) -> dict[str, Any]:
        """Get an application visible to its applicant or the posting's guardian."""
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATION_WITH_OWNER, (application_id,))
            application = row_as_dict(cur)

        if not application:
            raise NotFoundError("Application not found")
        if str(user_id) not in (str(application["caregiver_id"]), str(application["guardian_id"])):
            raise AuthorizationError("You do not have access to this application")
        return application

    def list_for_caregiver(self, caregiver_id: str) -> list[dict[str, Any]]:
        with self.db.get_cursor() as cur:
            cur.execute(LIST_FOR_CAREGIVER, (caregiver_id,))
            return rows_as_dicts(cur)

    def list_for_guardian(self, guardian_id: str, job_id: str | None = None) -> list[dict[str, Any]]:
        """List applications to the guardian's postings, optionally for one posting."""
        with self.db.get_cursor() as cur:
            cur.execute(LIST_FOR_GUARDIAN, (guardian_id, job_id, job_id))
            return rows_as_dicts(cur)

    def _contacts(self, application_id: str) -> dict[str, Any] | None:
        with self.db.get_cursor() as cur:
            cur.execute(GET_APPLICATION_CONTACTS, (application_id,))
            return row_as_dict(cur)

    def _notify_guardian(self, application_id: str) -> None:
        if not self.dispatcher:
            return
        try:
            contacts = self._contacts(application_id)
            if contacts:
                self.dispatcher.notify(
                    APPLICATION_RECEIVED,
                    contacts["guardian_phone"],
                    {"caregiver_name": contacts["caregiver_name"], "job_title": contacts["job_title"]},
                )
        except Exception as e:
            logger.warning(f"Skipping notification for application {application_id}: {e}")

    def _notify_caregiver(self, application_id: str, decision: str) -> None:
        if not self.dispatcher:
            return
        try:
            contacts = self._contacts(application_id)
            if not contacts:
                return
            if decision == "accepted":
                self.dispatcher.notify(
                    APPLICATION_ACCEPTED,
                    contacts["caregiver_phone"],
                    {"guardian_name": contacts["guardian_name"], "job_title": contacts["job_title"]},
                )
            else:
                self.dispatcher.notify(
                    APPLICATION_REJECTED,
                    contacts["caregiver_phone"],
                    {"job_title": contacts["job_title"]},
                )
        except Exception as e:
            logger.warning(f"Skipping notification for application {application_id}: {e}")
