import logging

from flask import Blueprint, jsonify
from flask_jwt_extended import get_jwt_identity, jwt_required

from carematch.shared.errors import CareMatchError, NotFoundError

from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import json_body
from ..utils.services import get_user_service

logger = logging.getLogger(__name__)
users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("/profile", methods=["POST"])
@jwt_required()
def api_complete_profile():
    """Complete the caller's profile and fix their role."""
    try:
        user_id = get_jwt_identity()
        data = json_body()
        user = get_user_service().complete_profile(
            user_id=user_id,
            email=data.get("email"),
            name=data.get("name"),
            phone=data.get("phone"),
            role=data.get("role"),
            avatar_url=data.get("avatar_url"),
            introduction=data.get("introduction"),
        )
        return jsonify({"user": user}), 201
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error completing profile: {e}", exc_info=True)
        return unexpected_error_response(e)


@users_bp.route("/me", methods=["GET"])
@jwt_required()
def api_get_me():
    """Get the caller's profile."""
    try:
        user = get_user_service().get_user(get_jwt_identity())
        if not user:
            raise NotFoundError("Profile not found")
        return jsonify({"user": user}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching profile: {e}", exc_info=True)
        return unexpected_error_response(e)
