import logging
from uuid import UUID

from flask import Blueprint, jsonify, request

from carematch.shared.errors import CareMatchError
from carematch.shared.validators import require_uuid

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import json_body
from ..utils.services import get_application_service

logger = logging.getLogger(__name__)
applications_bp = Blueprint("applications", __name__, url_prefix="/api/applications")


@applications_bp.route("", methods=["GET"])
@role_required("caregiver", "guardian")
def api_list_applications():
    """List the caller's applications, or applications to the caller's postings."""
    try:
        user_id, role = current_identity()
        service = get_application_service()
        if role == "caregiver":
            applications = service.list_for_caregiver(user_id)
        else:
            job_id = request.args.get("job_id") or None
            if job_id:
                job_id = require_uuid(job_id, "job_id")
            applications = service.list_for_guardian(user_id, job_id=job_id)
        return jsonify({"applications": applications}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing applications: {e}", exc_info=True)
        return unexpected_error_response(e)


@applications_bp.route("", methods=["POST"])
@role_required("caregiver")
def api_submit_application():
    """Apply to an open posting."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        job_id = require_uuid(data.get("job_id"), "job_id")
        application = get_application_service().submit(
            job_id=job_id, caregiver_id=user_id, message=data.get("message")
        )
        return jsonify({"application": application}), 201
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error submitting application: {e}", exc_info=True)
        return unexpected_error_response(e)


@applications_bp.route("/<uuid:application_id>", methods=["GET"])
@role_required("caregiver", "guardian")
def api_get_application(application_id: UUID):
    """Get an application visible to the caller."""
    try:
        user_id, _ = current_identity()
        application = get_application_service().get_application(str(application_id), user_id)
        return jsonify({"application": application}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching application {application_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@applications_bp.route("/<uuid:application_id>", methods=["PATCH"])
@role_required("guardian")
def api_decide_application(application_id: UUID):
    """Accept or reject a pending application. Acceptance opens the chat room."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        application = get_application_service().decide(
            application_id=str(application_id), guardian_id=user_id, decision=data.get("status")
        )
        return jsonify({"application": application}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error deciding application {application_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@applications_bp.route("/<uuid:application_id>", methods=["DELETE"])
@role_required("caregiver")
def api_withdraw_application(application_id: UUID):
    """Withdraw a pending application."""
    try:
        user_id, _ = current_identity()
        get_application_service().withdraw(str(application_id), user_id)
        return jsonify({"message": "Application withdrawn"}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error withdrawing application {application_id}: {e}", exc_info=True)
        return unexpected_error_response(e)
