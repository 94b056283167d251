import logging
import os

from flask import Blueprint, jsonify

from ..utils.services import get_database

logger = logging.getLogger(__name__)
system_bp = Blueprint("system", __name__)


@system_bp.route("/api/health")
def api_health():
    """Health check endpoint."""
    try:
        db_status = "healthy" if get_database().ping() else "unhealthy"
    except Exception as e:
        logger.warning(f"Health check database ping failed: {e}")
        db_status = "unhealthy"

    response = {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
        "environment": os.getenv("ENVIRONMENT", "development"),
    }
    return jsonify(response)
