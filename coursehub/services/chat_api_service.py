"""Business logic handlers for chat APIs."""

import logging

from coursehub.domain import ResourceKind
from coursehub.errors import NotAllowedError
from coursehub.logging_config import log_event
from coursehub.repositories import chat_repo
from coursehub.services import entitlement_service


def get_room(app_ctx, principal, room_id):
    resolved = entitlement_service.authorize_resource(app_ctx, principal, ResourceKind.CHAT_ROOM, room_id)
    return resolved.to_payload()


def delete_message(app_ctx, principal, message_id):
    """Senders may delete their own messages; course instructors may delete any."""
    resolved = entitlement_service.resolve_resource(app_ctx, ResourceKind.CHAT_MESSAGE, message_id)
    is_sender = str(resolved.data.get('sender_id', '') or '') == principal.uid
    if not is_sender and not entitlement_service.is_course_instructor(principal, resolved.course):
        raise NotAllowedError('You are not allowed to delete this message')
    chat_repo.delete_message(app_ctx.require_db(), resolved.resource_id)
    log_event(
        app_ctx.logger,
        logging.INFO,
        'chat_message_deleted',
        uid=principal.uid,
        message_id=resolved.resource_id,
        room_id=resolved.data.get('room_id', ''),
        by_sender=is_sender,
    )
    return {'id': resolved.resource_id, 'room_id': resolved.data.get('room_id', '')}
