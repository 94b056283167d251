"""
Shared infrastructure for services.

This package contains shared building blocks used across multiple services,
such as the database abstraction and the error taxonomy.
"""

from .database import Database, PostgreSQLDatabase, row_as_dict, rows_as_dicts
from .errors import (
    AuthorizationError,
    CareMatchError,
    ConflictError,
    DuplicateApplicationError,
    InvalidStateError,
    NotFoundError,
    TransientError,
    ValidationError,
)
from .structured_logging import get_structured_logger, log_with_context
from .validators import parse_timestamp, require_uuid

__all__ = [
    "AuthorizationError",
    "CareMatchError",
    "ConflictError",
    "Database",
    "DuplicateApplicationError",
    "InvalidStateError",
    "NotFoundError",
    "PostgreSQLDatabase",
    "TransientError",
    "ValidationError",
    "get_structured_logger",
    "log_with_context",
    "parse_timestamp",
    "require_uuid",
    "row_as_dict",
    "rows_as_dicts",
]
