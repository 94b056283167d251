import logging
from uuid import UUID

from flask import Blueprint, jsonify, request

from carematch.shared.errors import CareMatchError, ValidationError
from carematch.shared.validators import require_uuid

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import json_body
from ..utils.services import get_review_service

logger = logging.getLogger(__name__)
reviews_bp = Blueprint("reviews", __name__, url_prefix="/api/reviews")


@reviews_bp.route("/write/<uuid:job_id>", methods=["GET"])
@role_required("caregiver", "guardian")
def api_review_eligibility(job_id: UUID):
    """Whom the caller may review for a completed job, and whether they already did."""
    try:
        user_id, _ = current_identity()
        result = get_review_service().eligible_reviewee(str(job_id), user_id)
        return jsonify(
            {
                "job": result["job"],
                "reviewee": result["reviewee"],
                "alreadyReviewed": result["already_reviewed"],
            }
        ), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error checking review eligibility for job {job_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@reviews_bp.route("", methods=["POST"])
@role_required("caregiver", "guardian")
def api_submit_review():
    """Review the counterpart of a completed job."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        if data.get("job_id") is None or data.get("reviewee_id") is None or data.get("rating") is None:
            raise ValidationError("job_id, reviewee_id and rating are required")

        review = get_review_service().submit(
            job_id=require_uuid(data["job_id"], "job_id"),
            reviewer_id=user_id,
            reviewee_id=require_uuid(data["reviewee_id"], "reviewee_id"),
            rating=data["rating"],
            comment=data.get("comment"),
        )
        return jsonify({"review": review}), 201
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error submitting review: {e}", exc_info=True)
        return unexpected_error_response(e)


@reviews_bp.route("", methods=["GET"])
def api_list_reviews():
    """List reviews received by a user and/or written for a job."""
    try:
        reviewee_id = request.args.get("user_id") or None
        job_id = request.args.get("job_id") or None
        result = get_review_service().list_reviews(
            reviewee_id=require_uuid(reviewee_id, "user_id") if reviewee_id else None,
            job_id=require_uuid(job_id, "job_id") if job_id else None,
        )
        return jsonify(result), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing reviews: {e}", exc_info=True)
        return unexpected_error_response(e)
