"""User profile service."""

import logging
import re
from typing import Any

from carematch.caregivers.caregiver_service import validate_introduction
from carematch.shared.database import Database, row_as_dict
from carematch.shared.errors import ConflictError, ValidationError

from .queries import GET_USER_BY_ID, INSERT_INITIAL_CAREGIVER_PROFILE, INSERT_USER

logger = logging.getLogger(__name__)

ROLES = ("caregiver", "guardian")

PHONE_PATTERN = re.compile(r"^01[0-9][0-9]{7,8}$")


class UserService:
    """Service for profile completion and user lookup."""

    def __init__(self, database: Database):
        """Initialize the user service.

        Args:
            database: Database connection interface
        """
        if not database:
            raise ValueError("Database is required")
        self.db = database

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        """Get a user by ID.

        Args:
            user_id: User ID

        Returns:
            User dictionary or None if not found
        """
        with self.db.get_cursor() as cur:
            cur.execute(GET_USER_BY_ID, (user_id,))
            return row_as_dict(cur)

    def complete_profile(
        self,
        user_id: str,
        email: str,
        name: str,
        phone: str,
        role: str,
        avatar_url: str | None = None,
        introduction: str | None = None,
    ) -> dict[str, Any]:
        """Create the user row that carries the caller's role.

        The role cannot be changed afterwards. A caregiver also gets an empty,
        available caregiver profile in the same transaction.

        Args:
            user_id: Identity issued by the session provider
            email: Email address from the session provider
            name: Display name (at least 2 characters)
            phone: Mobile number, dashes allowed; stored without dashes
            role: 'caregiver' or 'guardian'
            avatar_url: Optional avatar URL
            introduction: Optional caregiver introduction

        Returns:
            The created user dictionary

        Raises:
            ValidationError: If any field is invalid
            ConflictError: If the profile already exists
        """
        if not isinstance(email, str) or not email.strip():
            raise ValidationError("Email is required")
        if not isinstance(name, str) or len(name.strip()) < 2:
            raise ValidationError("Name must be at least 2 characters")
        if phone is not None and not isinstance(phone, str):
            raise ValidationError("Invalid phone number")
        normalized_phone = (phone or "").replace("-", "").strip()
        if not PHONE_PATTERN.match(normalized_phone):
            raise ValidationError("Invalid phone number")
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
        if avatar_url is not None and not isinstance(avatar_url, str):
            raise ValidationError("Avatar URL must be text")
        introduction = validate_introduction(introduction)

        with self.db.transaction() as cur:
            cur.execute(
                INSERT_USER,
                (user_id, email.strip(), name.strip(), normalized_phone, role, avatar_url or None),
            )
            user = row_as_dict(cur)
            if not user:
                raise ConflictError("Profile already completed")

            if role == "caregiver":
                cur.execute(INSERT_INITIAL_CAREGIVER_PROFILE, (user["id"], introduction))

        logger.info(f"Completed {role} profile for user {user['id']}")
        return user
