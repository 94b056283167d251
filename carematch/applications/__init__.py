"""Application state machine: submit, decide, withdraw."""

from .application_service import DECISIONS, ApplicationService

__all__ = ["DECISIONS", "ApplicationService"]
