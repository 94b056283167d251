import logging
from uuid import UUID

from flask import Blueprint, current_app, jsonify, request

from carematch.shared.errors import CareMatchError, ValidationError

from ..utils.decorators import current_identity, role_required
from ..utils.errors import error_response, unexpected_error_response
from ..utils.payload import int_arg, json_body
from ..utils.services import get_chat_coordinator, get_message_log

logger = logging.getLogger(__name__)
chat_bp = Blueprint("chat", __name__, url_prefix="/api/chat")


@chat_bp.route("/rooms", methods=["GET"])
@role_required("caregiver", "guardian")
def api_list_rooms():
    """List the caller's rooms with last message and unread count."""
    try:
        user_id, role = current_identity()
        rooms = get_chat_coordinator().list_rooms(user_id, role)
        return jsonify({"rooms": rooms}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error listing chat rooms: {e}", exc_info=True)
        return unexpected_error_response(e)


@chat_bp.route("/rooms/<uuid:room_id>/messages", methods=["GET"])
@role_required("caregiver", "guardian")
def api_page_messages(room_id: UUID):
    """Page a room's messages.

    ``?before=<ts>`` (or no cursor) loads history and marks the counterpart's
    messages read. ``?after=<ts>`` polls for messages newer than ``ts``.
    """
    try:
        user_id, _ = current_identity()
        before = request.args.get("before") or None
        after = request.args.get("after") or None
        if before and after:
            raise ValidationError("Use either before or after, not both")
        limit = int_arg("limit", current_app.config.get("MESSAGE_PAGE_DEFAULT", 50))

        page = get_message_log().page(
            room_id=str(room_id),
            user_id=user_id,
            cursor=after or before,
            direction="after" if after else "before",
            limit=limit,
        )
        return jsonify({"messages": page["messages"], "hasMore": page["has_more"]}), 200
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error fetching messages for room {room_id}: {e}", exc_info=True)
        return unexpected_error_response(e)


@chat_bp.route("/rooms/<uuid:room_id>/messages", methods=["POST"])
@role_required("caregiver", "guardian")
def api_send_message(room_id: UUID):
    """Append a message to a room."""
    try:
        user_id, _ = current_identity()
        data = json_body()
        message = get_message_log().append(str(room_id), user_id, data.get("content"))
        return jsonify({"message": message}), 201
    except CareMatchError as e:
        return error_response(e)
    except Exception as e:
        logger.error(f"Error sending message to room {room_id}: {e}", exc_info=True)
        return unexpected_error_response(e)
