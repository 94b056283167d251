"""Dashboard summaries for caregivers and guardians."""

from __future__ import annotations

import logging
from typing import Any

from carematch.caregivers.queries import GET_PROFILE_BY_USER
from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import NotFoundError

from .queries import (
    CAREGIVER_APPLICATION_STATS,
    CAREGIVER_RECENT_APPLICATIONS,
    GET_USER_BRIEF,
    GUARDIAN_APPLICATION_STATS,
    GUARDIAN_POSTING_STATS,
    GUARDIAN_RECENT_POSTINGS,
)

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def _counts(row: dict[str, Any] | None) -> dict[str, int]:
    return {key: int(value or 0) for key, value in (row or {}).items()}


class DashboardService:
    """Read-only summaries shown on each role's landing page."""

    def __init__(self, database: Database):
        """
        Initialize the dashboard service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def _get_user(self, cur, user_id: str) -> dict[str, Any]:
        cur.execute(GET_USER_BRIEF, (user_id,))
        user = row_as_dict(cur)
        if not user:
            raise NotFoundError("User not found")
        return user

    def caregiver_dashboard(self, user_id: str) -> dict[str, Any]:
        """
        Summarize a caregiver's profile and applications.

        Returns:
            {"user", "profile", "applications" (5 most recent, with job),
             "stats": {total_applications, pending_applications,
             accepted_applications}}
        """
        with self.db.get_cursor() as cur:
            user = self._get_user(cur, user_id)
            cur.execute(GET_PROFILE_BY_USER, (user_id,))
            profile = row_as_dict(cur)
            cur.execute(CAREGIVER_RECENT_APPLICATIONS, (user_id, RECENT_LIMIT))
            applications = rows_as_dicts(cur)
            cur.execute(CAREGIVER_APPLICATION_STATS, (user_id,))
            stats = _counts(row_as_dict(cur))

        return {"user": user, "profile": profile, "applications": applications, "stats": stats}

    def guardian_dashboard(self, user_id: str) -> dict[str, Any]:
        """
        Summarize a guardian's postings and the applications they received.

        Returns:
            {"user", "jobs" (5 most recent, with applications),
             "stats": {total_jobs, open_jobs, total_applications,
             pending_applications}}
        """
        with self.db.get_cursor() as cur:
            user = self._get_user(cur, user_id)
            cur.execute(GUARDIAN_RECENT_POSTINGS, (user_id, RECENT_LIMIT))
            jobs = rows_as_dicts(cur)
            cur.execute(GUARDIAN_POSTING_STATS, (user_id,))
            stats = _counts(row_as_dict(cur))
            cur.execute(GUARDIAN_APPLICATION_STATS, (user_id,))
            stats.update(_counts(row_as_dict(cur)))

        return {"user": user, "jobs": jobs, "stats": stats}
