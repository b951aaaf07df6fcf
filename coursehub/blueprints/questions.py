from flask import Blueprint

from coursehub.domain import ResourceKind
from coursehub.services import deletion_service, quizzes_api_service
from coursehub.web import json_payload, require_principal, success_response

questions_bp = Blueprint('questions_api', __name__)


@questions_bp.route('/api/questions/<question_id>', methods=['GET'])
@require_principal
def get_question(app_ctx, principal, question_id):
    question = quizzes_api_service.get_question(app_ctx, principal, question_id)
    return success_response('Question fetched successfully', {'question': question})


@questions_bp.route('/api/questions/<question_id>', methods=['DELETE'])
@require_principal
def delete_question(app_ctx, principal, question_id):
    issued = deletion_service.request_deletion(app_ctx, principal, ResourceKind.QUESTION, question_id)
    return success_response('Check your email to confirm question deletion', {'expires_at': issued.expires_at})


@questions_bp.route('/api/questions/<question_id>/confirm-delete', methods=['POST'])
@require_principal
def confirm_delete_question(app_ctx, principal, question_id):
    code = json_payload().get('code', '')
    deletion_service.confirm_deletion(app_ctx, principal, ResourceKind.QUESTION, question_id, code)
    return success_response('Question deleted successfully', {'id': question_id})
