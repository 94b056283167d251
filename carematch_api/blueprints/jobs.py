import logging
from uuid import UUID

from flask import Blueprint, jsonify, request

from carematch.postings import JobPostingPatch, PatientInfo
from carematch.shared.errors import CareMatchError, NotFoundError, ValidationError

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import json_body
from ..utils.services import get_posting_service

logger = logging.getLogger(__name__)
jobs_bp = Blueprint("jobs", __name__, url_prefix="/api")


@jobs_bp.route("/jobs", methods=["GET"])
def api_list_jobs():
    """Public posting list, newest first."""
    try:
        postings = get_posting_service().list_postings(
            status=request.args.get("status", "open"),
            care_type=request.args.get("care_type") or None,
            location=request.args.get("location") or None,
        )
        return jsonify({"jobs": postings}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing jobs: {e}", exc_info=True)
        return unexpected_error_response(e)


@jobs_bp.route("/jobs", methods=["POST"])
@role_required("guardian")
def api_create_job():
    """Create an open posting owned by the calling guardian."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        patient_info = data.get("patient_info")
        if patient_info is not None and not isinstance(patient_info, dict):
            raise ValidationError("patient_info must be an object")

        posting = get_posting_service().create_posting(
            guardian_id=user_id,
            title=data.get("title"),
            description=data.get("description"),
            location=data.get("location"),
            start_date=data.get("start_date"),
            hourly_rate=data.get("hourly_rate"),
            care_type=data.get("care_type") or None,
            end_date=data.get("end_date") or None,
            patient_info=PatientInfo.from_dict(patient_info),
        )
        return jsonify({"job": posting}), 201
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error creating job: {e}", exc_info=True)
        return unexpected_error_response(e)


@jobs_bp.route("/jobs/<uuid:job_id>", methods=["GET"])
def api_get_job(job_id: UUID):
    """Get one posting."""
    try:
        posting = get_posting_service().get_posting(str(job_id))
        if not posting:
            raise NotFoundError("Posting not found")
        return jsonify({"job": posting}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching job {job_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@jobs_bp.route("/jobs/<uuid:job_id>", methods=["PATCH"])
@role_required("guardian")
def api_update_job(job_id: UUID):
    """Patch a posting owned by the calling guardian, including its status."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        if "patient_info" in data and data["patient_info"] is not None and not isinstance(
            data["patient_info"], dict
        ):
            raise ValidationError("patient_info must be an object")

        posting = get_posting_service().update_posting(
            job_id=str(job_id), guardian_id=user_id, patch=JobPostingPatch.from_dict(data)
        )
        return jsonify({"job": posting}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error updating job {job_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@jobs_bp.route("/guardian/jobs", methods=["GET"])
@role_required("guardian")
def api_list_guardian_jobs():
    """List the calling guardian's postings with their applications."""
    try:
        user_id, _ = current_identity()
        postings = get_posting_service().list_guardian_postings(user_id)
        return jsonify({"jobs": postings}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing guardian jobs: {e}", exc_info=True)
        return unexpected_error_response(e)
