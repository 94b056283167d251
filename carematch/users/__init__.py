"""User profile services."""

from .user_service import ROLES, UserService

__all__ = ["ROLES", "UserService"]
