from flask import Blueprint

from coursehub.domain import ResourceKind
from coursehub.services import deletion_service, quizzes_api_service
from coursehub.web import json_payload, require_principal, success_response

quizzes_bp = Blueprint('quizzes_api', __name__)


@quizzes_bp.route('/api/quizzes/<quiz_id>', methods=['GET'])
@require_principal
def get_quiz(app_ctx, principal, quiz_id):
    quiz = quizzes_api_service.get_quiz(app_ctx, principal, quiz_id)
    return success_response('Quiz fetched successfully', {'quiz': quiz})


@quizzes_bp.route('/api/quizzes/<quiz_id>', methods=['DELETE'])
@require_principal
def delete_quiz(app_ctx, principal, quiz_id):
    issued = deletion_service.request_deletion(app_ctx, principal, ResourceKind.QUIZ, quiz_id)
    return success_response('Check your email to confirm quiz deletion', {'expires_at': issued.expires_at})


@quizzes_bp.route('/api/quizzes/<quiz_id>/confirm-delete', methods=['POST'])
@require_principal
def confirm_delete_quiz(app_ctx, principal, quiz_id):
    code = json_payload().get('code', '')
    deleted = deletion_service.confirm_deletion(app_ctx, principal, ResourceKind.QUIZ, quiz_id, code)
    return success_response('Quiz deleted successfully', {'id': quiz_id, 'deleted_documents': deleted})
