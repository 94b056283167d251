"""Input coercion helpers shared by services."""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from typing import Any

from .errors import ValidationError

# A "+HH:MM" offset whose plus sign was decoded to a space in a query string
_SPACE_OFFSET = re.compile(r"^(.*\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?) (\d{2}:?\d{2})$")


def require_uuid(value: Any, field: str) -> str:
    """Return ``value`` as a canonical UUID string or raise ValidationError."""
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    try:
        return str(uuid.UUID(str(value)))
    except ValueError as e:
        raise ValidationError(f"{field} must be a valid id") from e


def parse_timestamp(value: str, field: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Accepts a ``Z`` suffix and a positive offset whose ``+`` arrived as a space.
    """
    try:
        text = _SPACE_OFFSET.sub(r"\1+\2", value.strip())
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"{field} must be an ISO-8601 timestamp") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
