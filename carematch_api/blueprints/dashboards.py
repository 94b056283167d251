import logging

from flask import Blueprint, jsonify

from carematch.shared.errors import CareMatchError

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.services import get_dashboard_service

logger = logging.getLogger(__name__)
dashboards_bp = Blueprint("dashboards", __name__, url_prefix="/api")


@dashboards_bp.route("/caregiver/dashboard", methods=["GET"])
@role_required("caregiver")
def api_caregiver_dashboard():
    """Get the caregiver's profile, recent applications and counts."""
    try:
        user_id, _ = current_identity()
        return jsonify(get_dashboard_service().caregiver_dashboard(user_id)), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Dashboard error: {e}", exc_info=True)
        return unexpected_error_response(e)


@dashboards_bp.route("/guardian/dashboard", methods=["GET"])
@role_required("guardian")
def api_guardian_dashboard():
    """Get the guardian's recent postings with applications and counts."""
    try:
        user_id, _ = current_identity()
        return jsonify(get_dashboard_service().guardian_dashboard(user_id)), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Dashboard error: {e}", exc_info=True)
        return unexpected_error_response(e)
