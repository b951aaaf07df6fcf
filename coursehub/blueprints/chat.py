from flask import Blueprint

from coursehub.services import chat_api_service
from coursehub.web import require_principal, success_response

chat_bp = Blueprint('chat_api', __name__)


@chat_bp.route('/api/chat/rooms/<room_id>', methods=['GET'])
@require_principal
def get_room(app_ctx, principal, room_id):
    room = chat_api_service.get_room(app_ctx, principal, room_id)
    return success_response('Chat room fetched successfully', room)


@chat_bp.route('/api/chat/messages/<message_id>', methods=['DELETE'])
@require_principal
def delete_message(app_ctx, principal, message_id):
    deleted = chat_api_service.delete_message(app_ctx, principal, message_id)
    return success_response('Message deleted successfully', deleted)
