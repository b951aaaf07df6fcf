"""Code-gated deletion of course resources.

Deleting is a two-step flow: the owning instructor asks for a deletion and
receives an emailed code, then confirms with the code. Only the
confirmation touches data.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from coursehub.domain import Relation, ResourceKind, VerifyReason
from coursehub.errors import ConflictError, NotAllowedError
from coursehub.logging_config import log_event
from coursehub.repositories import (
    certificates_repo,
    courses_repo,
    lessons_repo,
    questions_repo,
    quizzes_repo,
)
from coursehub.repositories.query_utils import snapshot_to_dict
from coursehub.services import entitlement_service, verify_code_service

# One Firestore commit holds at most 500 writes; the quiz, its course and the
# verification code take three of them.
MAX_CASCADE_QUESTIONS = 497


def _without(ids, resource_id):
    return [item for item in (ids or []) if str(item) != resource_id]


def _delete_question(db, txn, resolved):
    quiz_ref = quizzes_repo.doc_ref(db, resolved.data.get('quiz_id', ''))
    quiz_snapshot = quiz_ref.get(transaction=txn)
    txn.delete(questions_repo.doc_ref(db, resolved.resource_id))
    if quiz_snapshot.exists:
        quiz = quiz_snapshot.to_dict() or {}
        txn.update(quiz_ref, {'questions_id': _without(quiz.get('questions_id'), resolved.resource_id)})
    return 1


def _delete_lesson(db, txn, resolved):
    course_ref = courses_repo.doc_ref(db, resolved.course_id)
    course_snapshot = course_ref.get(transaction=txn)
    txn.delete(lessons_repo.doc_ref(db, resolved.resource_id))
    if course_snapshot.exists:
        course = course_snapshot.to_dict() or {}
        txn.update(course_ref, {'lessons_id': _without(course.get('lessons_id'), resolved.resource_id)})
    return 1


def _delete_quiz(db, txn, resolved):
    course_ref = courses_repo.doc_ref(db, resolved.course_id)
    course_snapshot = course_ref.get(transaction=txn)
    question_docs = questions_repo.list_by_quiz(db, resolved.resource_id, limit=MAX_CASCADE_QUESTIONS + 1, transaction=txn)
    if len(question_docs) > MAX_CASCADE_QUESTIONS:
        raise ConflictError(
            f'This quiz has more than {MAX_CASCADE_QUESTIONS} questions. Delete some of its questions first, then try again.'
        )
    for doc in question_docs:
        txn.delete(questions_repo.doc_ref(db, doc.id))
    txn.delete(quizzes_repo.doc_ref(db, resolved.resource_id))
    if course_snapshot.exists:
        course = course_snapshot.to_dict() or {}
        txn.update(course_ref, {'quizzes_id': _without(course.get('quizzes_id'), resolved.resource_id)})
    return 1 + len(question_docs)


def _delete_certificate(db, txn, resolved):
    txn.delete(certificates_repo.doc_ref(db, resolved.resource_id))
    return 1


@dataclass(frozen=True)
class DeletionTarget:
    reason: VerifyReason
    title_field: str
    delete: Callable


DELETION_TARGETS = {
    ResourceKind.QUESTION: DeletionTarget(VerifyReason.DELETE_QUESTION, 'question_text', _delete_question),
    ResourceKind.LESSON: DeletionTarget(VerifyReason.DELETE_LESSON, 'title', _delete_lesson),
    ResourceKind.QUIZ: DeletionTarget(VerifyReason.DELETE_QUIZ, 'title', _delete_quiz),
    ResourceKind.CERTIFICATE: DeletionTarget(VerifyReason.DELETE_CERTIFICATE, 'title', _delete_certificate),
}


def _authorize_owner(app_ctx, principal, kind, resource_id):
    return entitlement_service.authorize_resource(
        app_ctx,
        principal,
        kind,
        resource_id,
        relation=Relation.OWNERSHIP,
        denied_message=f'You are not allowed to delete this {kind.label}',
    )


def request_deletion(app_ctx, principal, kind, resource_id):
    """Email a deletion code to the owning instructor. Deletes nothing."""
    target = DELETION_TARGETS[kind]
    resolved = _authorize_owner(app_ctx, principal, kind, resource_id)
    title = str(resolved.data.get(target.title_field, '') or '').strip()[:120]
    subject = f"Verification code to delete your {kind.label}"
    if title:
        subject = f"{subject} \"{title}\""
    return verify_code_service.issue_verify_code(app_ctx, principal, target.reason, resolved.resource_id, subject)


def confirm_deletion(app_ctx, principal, kind, resource_id, code):
    """Consume the deletion code and delete the resource atomically.

    Ownership is checked again inside the confirming transaction, against
    the course as it is at commit time. Returns the number of deleted documents.
    """
    target = DELETION_TARGETS[kind]
    resolved = _authorize_owner(app_ctx, principal, kind, resource_id)
    db = app_ctx.require_db()

    def _delete_if_still_owner(txn):
        course = snapshot_to_dict(courses_repo.get_doc(db, resolved.course_id, transaction=txn))
        if course is None or not entitlement_service.is_course_instructor(principal, course):
            raise NotAllowedError(f'You are not allowed to delete this {kind.label}')
        return target.delete(db, txn, resolved)

    deleted = verify_code_service.confirm_verify_code(
        app_ctx,
        principal,
        target.reason,
        resolved.resource_id,
        code,
        on_confirmed=_delete_if_still_owner,
    )
    log_event(app_ctx.logger, logging.INFO, 'resource_deleted', uid=principal.uid, kind=kind.value, resource_id=resolved.resource_id, deleted_docs=deleted)
    return deleted
