import logging
from uuid import UUID

from flask import Blueprint, jsonify, request

from carematch.shared.errors import CareMatchError

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import json_body
from ..utils.services import get_caregiver_service

logger = logging.getLogger(__name__)
caregivers_bp = Blueprint("caregivers", __name__, url_prefix="/api")

PROFILE_FIELDS = (
    "experience_years",
    "certifications",
    "specializations",
    "introduction",
    "hourly_rate",
    "is_available",
    "location",
)


@caregivers_bp.route("/caregivers", methods=["GET"])
def api_list_caregivers():
    """Public caregiver directory."""
    try:
        available_only = request.args.get("available", "").lower() in ("1", "true", "yes")
        result = get_caregiver_service().list_caregivers(
            location=request.args.get("location") or None,
            available_only=available_only,
        )
        return jsonify(result), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing caregivers: {e}", exc_info=True)
        return unexpected_error_response(e)


@caregivers_bp.route("/caregivers/<uuid:caregiver_id>", methods=["GET"])
def api_get_caregiver(caregiver_id: UUID):
    """Public caregiver page with recent reviews and the average rating."""
    try:
        return jsonify(get_caregiver_service().get_caregiver(str(caregiver_id))), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching caregiver {caregiver_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@caregivers_bp.route("/caregiver/profile", methods=["GET"])
@role_required("caregiver")
def api_get_own_profile():
    try:
        user_id, _ = current_identity()
        return jsonify({"profile": get_caregiver_service().get_profile(user_id)}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching caregiver profile: {e}", exc_info=True)
        return unexpected_error_response(e)


@caregivers_bp.route("/caregiver/profile", methods=["PUT"])
@role_required("caregiver")
def api_update_own_profile():
    """Replace the caller's caregiver profile. Omitted fields reset to defaults."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        fields = {name: data[name] for name in PROFILE_FIELDS if data.get(name) is not None}
        profile = get_caregiver_service().update_profile(user_id=user_id, **fields)
        return jsonify({"profile": profile}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating caregiver profile: {e}", exc_info=True)
        return unexpected_error_response(e)
