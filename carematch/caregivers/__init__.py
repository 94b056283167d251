"""Caregiver profiles and the public caregiver directory."""

from .caregiver_service import CaregiverService

__all__ = ["CaregiverService"]
