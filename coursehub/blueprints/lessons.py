from flask import Blueprint

from coursehub.domain import ResourceKind
from coursehub.services import deletion_service, lessons_api_service
from coursehub.web import json_payload, require_principal, success_response

lessons_bp = Blueprint('lessons_api', __name__)


@lessons_bp.route('/api/lessons/<lesson_id>', methods=['PATCH'])
@require_principal
def update_lesson(app_ctx, principal, lesson_id):
    lesson = lessons_api_service.update_lesson(app_ctx, principal, lesson_id, json_payload())
    return success_response('Lesson updated successfully', lesson)


@lessons_bp.route('/api/lessons/<lesson_id>', methods=['DELETE'])
@require_principal
def delete_lesson(app_ctx, principal, lesson_id):
    issued = deletion_service.request_deletion(app_ctx, principal, ResourceKind.LESSON, lesson_id)
    return success_response('Check your email to confirm lesson deletion', {'expires_at': issued.expires_at})


@lessons_bp.route('/api/lessons/<lesson_id>/confirm-delete', methods=['POST'])
@require_principal
def confirm_delete_lesson(app_ctx, principal, lesson_id):
    code = json_payload().get('code', '')
    deletion_service.confirm_deletion(app_ctx, principal, ResourceKind.LESSON, lesson_id, code)
    return success_response('Lesson deleted successfully', {'id': lesson_id})
