"""
Review Gate

A completed posting can be reviewed once in each direction: the guardian
reviews the accepted caregiver, and the caregiver reviews the guardian.
"""

from __future__ import annotations

import logging
from typing import Any

from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

from .queries import (
    GET_ACCEPTED_CAREGIVER,
    GET_COMPLETED_POSTING,
    GET_USER_SUMMARY,
    INSERT_REVIEW,
    LIST_REVIEWS,
    REVIEW_EXISTS,
    REVIEW_STATS,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:
    """Service for review eligibility, submission and listing."""

    def __init__(self, database: Database):
        """
        Initialize the review service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    @staticmethod
    def _resolve_counterpart(cur, job_id: str, user_id: str) -> tuple[dict[str, Any], str]:
        """Return the completed posting and the id the caller may review.

        Raises:
            NotFoundError: If the posting is missing, not completed, or has no
                accepted application
            AuthorizationError: If the caller is neither side of the match
        """
        cur.execute(GET_COMPLETED_POSTING, (job_id,))
        job = row_as_dict(cur)
        if not job:
            raise NotFoundError("Completed job posting not found")

        cur.execute(GET_ACCEPTED_CAREGIVER, (job_id,))
        accepted = row_as_dict(cur)
        if not accepted:
            raise NotFoundError("No accepted application for this job posting")

        guardian_id = str(job["guardian_id"])
        caregiver_id = str(accepted["caregiver_id"])
        if str(user_id) == guardian_id:
            return job, caregiver_id
        if str(user_id) == caregiver_id:
            return job, guardian_id
        raise AuthorizationError("You are not part of this job")

    def eligible_reviewee(self, job_id: str, user_id: str) -> dict[str, Any]:
        """
        Determine whom the caller may review for a completed posting.

        Args:
            job_id: Posting ID
            user_id: Caller's user ID

        Returns:
            {"job": ..., "reviewee": {id, name, avatar_url, role},
             "already_reviewed": bool}
        """
        with self.db.get_cursor() as cur:
            job, reviewee_id = self._resolve_counterpart(cur, job_id, user_id)

            cur.execute(GET_USER_SUMMARY, (reviewee_id,))
            reviewee = row_as_dict(cur)
            if not reviewee:
                raise NotFoundError("Reviewee not found")

            cur.execute(REVIEW_EXISTS, (job_id, user_id, reviewee_id))
            already_reviewed = bool(cur.fetchone()[0])

        return {"job": job, "reviewee": reviewee, "already_reviewed": already_reviewed}

    def submit(
        self,
        job_id: str,
        reviewer_id: str,
        reviewee_id: str,
        rating: int,
        comment: str | None = None,
    ) -> dict[str, Any]:
        """
        Record a review for the caller's counterpart on a completed posting.

        Raises:
            ValidationError: If rating is not an integer in 1..5, the caller
                reviews itself, or the reviewee is not the counterpart
            NotFoundError: If the posting is not completed or has no match
            AuthorizationError: If the caller is not part of the match
            ConflictError: If this direction was already reviewed
        """
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError("Rating must be an integer")
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        if str(reviewee_id) == str(reviewer_id):
            raise ValidationError("You cannot review yourself")
        if comment is not None and not isinstance(comment, str):
            raise ValidationError("Comment must be text")
        comment = (comment or "").strip() or None

        with self.db.get_cursor() as cur:
            _, counterpart_id = self._resolve_counterpart(cur, job_id, reviewer_id)
            if counterpart_id != str(reviewee_id):
                raise ValidationError("You can only review the other side of this job")

            cur.execute(INSERT_REVIEW, (job_id, reviewer_id, reviewee_id, rating, comment))
            review = row_as_dict(cur)

        if not review:
            raise ConflictError("You have already reviewed this job")

        logger.info(f"Review {review['id']} for job {job_id} by {reviewer_id} (rating {rating})")
        return review

    def list_reviews(self, reviewee_id: str | None = None, job_id: str | None = None) -> dict[str, Any]:
        """
        List reviews, newest first, with the average rating over the same set.

        Returns:
            {"reviews": [...], "average_rating": float, "total_count": int}
        """
        params = (reviewee_id, reviewee_id, job_id, job_id)
        with self.db.get_cursor() as cur:
            cur.execute(LIST_REVIEWS, params)
            reviews = rows_as_dicts(cur)
            cur.execute(REVIEW_STATS, params)
            average_rating, total_count = cur.fetchone()

        return {
            "reviews": reviews,
            "average_rating": float(average_rating),
            "total_count": int(total_count),
        }
