"""
Caregiver Profiles

Caregivers describe their experience and availability here. Guardians browse
the profiles together with the ratings the caregiver has received.
"""

from __future__ import annotations

import logging
from typing import Any

from carematch.postings.models import MAX_HOURLY_RATE, MIN_HOURLY_RATE
from carematch.shared.database import Database, row_as_dict, rows_as_dicts
from carematch.shared.errors import NotFoundError, ValidationError

from .queries import (
    GET_CAREGIVER_DETAIL,
    GET_PROFILE_BY_USER,
    GET_RATING_SUMMARY,
    GET_RECENT_REVIEWS,
    LIST_CAREGIVERS,
    UPSERT_PROFILE,
)

logger = logging.getLogger(__name__)

MAX_INTRODUCTION_LENGTH = 2000
MAX_EXPERIENCE_YEARS = 80
MAX_TAGS = 20
MAX_TAG_LENGTH = 50
RECENT_REVIEW_LIMIT = 10
PROFILE_PREFIX = "profile_"


def validate_introduction(introduction: Any) -> str | None:
    """Return the stripped introduction, or None when blank."""
    if introduction is None:
        return None
    if not isinstance(introduction, str):
        raise ValidationError("Introduction must be text")
    introduction = introduction.strip()
    if len(introduction) > MAX_INTRODUCTION_LENGTH:
        raise ValidationError(f"Introduction must be at most {MAX_INTRODUCTION_LENGTH} characters")
    return introduction or None


def _tag_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"{field} must be a list of strings")
    tags = []
    for item in value:
        item = item.strip()
        if not item or item in tags:
            continue
        if len(item) > MAX_TAG_LENGTH:
            raise ValidationError(f"Each entry in {field} must be at most {MAX_TAG_LENGTH} characters")
        tags.append(item)
    if len(tags) > MAX_TAGS:
        raise ValidationError(f"{field} can have at most {MAX_TAGS} entries")
    return tags


def _nest_profile(row: dict[str, Any]) -> dict[str, Any]:
    caregiver = {k: v for k, v in row.items() if not k.startswith(PROFILE_PREFIX)}
    profile = {k[len(PROFILE_PREFIX) :]: v for k, v in row.items() if k.startswith(PROFILE_PREFIX)}
    caregiver["profile"] = profile if profile.get("id") else None
    return caregiver


class CaregiverService:
    """Service for caregiver profiles and the public caregiver directory."""

    def __init__(self, database: Database):
        """
        Initialize the caregiver service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        """Get the caller's own profile, or None if it has not been created."""
        with self.db.get_cursor() as cur:
            cur.execute(GET_PROFILE_BY_USER, (user_id,))
            return row_as_dict(cur)

    def update_profile(
        self,
        user_id: str,
        experience_years: int = 0,
        certifications: list[str] | None = None,
        specializations: list[str] | None = None,
        introduction: str | None = None,
        hourly_rate: int | None = None,
        is_available: bool = True,
        location: str | None = None,
    ) -> dict[str, Any]:
        """
        Replace the caller's profile, creating it if it does not exist yet.

        Omitted fields go back to their defaults.

        Args:
            user_id: Caregiver's user ID
            experience_years: Years of care experience (0 to 80)
            certifications: Certificate names
            specializations: Care specialities (e.g. dementia, rehabilitation)
            introduction: Free-text introduction
            hourly_rate: Desired hourly rate; None for negotiable
            is_available: Whether the caregiver is taking new jobs
            location: Preferred work area

        Returns:
            The stored profile dictionary

        Raises:
            ValidationError: If any field is invalid
            NotFoundError: If the caller has no caregiver account
        """
        if isinstance(experience_years, bool) or not isinstance(experience_years, int):
            raise ValidationError("Experience years must be an integer")
        if not 0 <= experience_years <= MAX_EXPERIENCE_YEARS:
            raise ValidationError(f"Experience years must be between 0 and {MAX_EXPERIENCE_YEARS}")
        certifications = _tag_list(certifications, "certifications")
        specializations = _tag_list(specializations, "specializations")
        introduction = validate_introduction(introduction)
        if hourly_rate is not None:
            if isinstance(hourly_rate, bool) or not isinstance(hourly_rate, int):
                raise ValidationError("Hourly rate must be an integer")
            if not MIN_HOURLY_RATE <= hourly_rate <= MAX_HOURLY_RATE:
                raise ValidationError(f"Hourly rate must be between {MIN_HOURLY_RATE} and {MAX_HOURLY_RATE}")
        if not isinstance(is_available, bool):
            raise ValidationError("is_available must be true or false")
        if location is not None and not isinstance(location, str):
            raise ValidationError("Location must be text")
        location = (location or "").strip() or None

        with self.db.get_cursor() as cur:
            cur.execute(
                UPSERT_PROFILE,
                (
                    experience_years,
                    certifications,
                    specializations,
                    introduction,
                    hourly_rate,
                    is_available,
                    location,
                    user_id,
                ),
            )
            profile = row_as_dict(cur)

        if not profile:
            raise NotFoundError("Caregiver not found")

        logger.info(f"Updated caregiver profile for user {user_id}")
        return profile

    def get_caregiver(self, caregiver_id: str) -> dict[str, Any]:
        """
        Get a caregiver's public page: profile, recent reviews and rating.

        Returns:
            {"caregiver": {..., "profile": {...} | None}, "reviews": [...],
             "average_rating": float, "review_count": int}

        Raises:
            NotFoundError: If no caregiver has this ID
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_CAREGIVER_DETAIL, (caregiver_id,))
            row = row_as_dict(cur)
            if not row:
                raise NotFoundError("Caregiver not found")

            cur.execute(GET_RECENT_REVIEWS, (caregiver_id, RECENT_REVIEW_LIMIT))
            reviews = rows_as_dicts(cur)
            cur.execute(GET_RATING_SUMMARY, (caregiver_id,))
            average_rating, review_count = cur.fetchone()

        return {
            "caregiver": _nest_profile(row),
            "reviews": reviews,
            "average_rating": float(average_rating),
            "review_count": int(review_count),
        }

    def list_caregivers(self, location: str | None = None, available_only: bool = False) -> dict[str, Any]:
        """
        List caregivers that have a profile, newest first.

        Returns:
            {"caregivers": [...], "locations": [...]}. locations holds the
            distinct first words of the listed caregivers' locations.
        """
        location = (location or "").strip() or None
        with self.db.get_cursor() as cur:
            cur.execute(LIST_CAREGIVERS, (location, location, bool(available_only)))
            caregivers = rows_as_dicts(cur)

        for caregiver in caregivers:
            caregiver["average_rating"] = float(caregiver["average_rating"])
            caregiver["review_count"] = int(caregiver["review_count"])

        locations = sorted({c["location"].split()[0] for c in caregivers if c.get("location")})
        return {"caregivers": caregivers, "locations": locations}
