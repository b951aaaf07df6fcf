"""Business logic handlers for quiz and question APIs."""

from coursehub.domain import ResourceKind
from coursehub.services import entitlement_service


def get_question(app_ctx, principal, question_id):
    resolved = entitlement_service.authorize_resource(app_ctx, principal, ResourceKind.QUESTION, question_id)
    return resolved.to_payload()


def get_quiz(app_ctx, principal, quiz_id):
    resolved = entitlement_service.authorize_resource(app_ctx, principal, ResourceKind.QUIZ, quiz_id)
    return resolved.to_payload()
