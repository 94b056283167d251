"""Post-completion review gate."""

from .review_service import ReviewService

__all__ = ["ReviewService"]
