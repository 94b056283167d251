import logging

from flask import jsonify

from carematch.shared.errors import CareMatchError

logger = logging.getLogger(__name__)


def error_response(error: CareMatchError):
    """Render a service error as ``{"error": {"kind", "message"}}`` with its status."""
    return jsonify({"error": error.to_dict()}), error.status_code


def unexpected_error_response(error: Exception):
    """Render any other exception as a sanitized 500."""
    return jsonify({"error": {"kind": "unexpected", "message": _sanitize_error_message(error)}}), 500


def _sanitize_error_message(error: Exception) -> str:
    """Sanitize error messages to avoid leaking sensitive information.

    Args:
        error: Exception object

    Returns:
        Sanitized error message safe for client display
    """
    error_str = str(error).lower()

    # Remove database connection strings
    if "password" in error_str or "connection" in error_str or "database" in error_str:
        return "Database operation failed. Please try again."

    # Remove API keys
    if "api" in error_str and ("key" in error_str or "token" in error_str):
        return "API authentication failed. Please check configuration."

    # Generic fallback for unknown errors
    return "An unexpected error occurred. Please try again later."
