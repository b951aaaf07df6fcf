"""Business logic handlers for lesson APIs."""

import logging

from coursehub.domain import Relation, ResourceKind
from coursehub.errors import BadRequestError, ConflictError, NotAllowedError, NotFoundError
from coursehub.logging_config import log_event
from coursehub.repositories import courses_repo, lessons_repo
from coursehub.services import entitlement_service

MAX_TITLE_LENGTH = 200
MAX_ID_LENGTH = 128


def _clean_text(value, field_name, max_length):
    if value is None:
        return ''
    if not isinstance(value, str):
        raise BadRequestError(f'{field_name} must be a string')
    value = value.strip()
    if len(value) > max_length:
        raise BadRequestError(f'{field_name} must be at most {max_length} characters')
    return value


def update_lesson(app_ctx, principal, lesson_id, payload):
    if not isinstance(payload, dict):
        raise BadRequestError('Invalid payload')
    title = _clean_text(payload.get('title'), 'title', MAX_TITLE_LENGTH)
    new_course_id = _clean_text(payload.get('course_id'), 'course_id', MAX_ID_LENGTH)
    if not title and not new_course_id:
        raise BadRequestError('Provide a title or a course_id to update')

    resolved = entitlement_service.authorize_resource(
        app_ctx,
        principal,
        ResourceKind.LESSON,
        lesson_id,
        relation=Relation.OWNERSHIP,
        denied_message='Unauthorized instructor',
    )
    lesson = resolved.data
    old_course_id = resolved.course_id
    db = app_ctx.require_db()

    if new_course_id:
        if new_course_id == old_course_id:
            raise ConflictError('Course ID is the same as the old Course ID')
        entitlement_service.check_course_entitlement(
            app_ctx,
            principal,
            new_course_id,
            relation=Relation.OWNERSHIP,
            denied_message='Unauthorized instructor',
        )

    if title:
        if lesson.get('title') == title:
            raise ConflictError('Title is the same as the old title')
        duplicate = lessons_repo.find_by_title(db, principal.uid, new_course_id or old_course_id, title)
        if duplicate is not None and duplicate.id != resolved.resource_id:
            raise ConflictError('Lesson title already exists')

    now_ts = app_ctx.clock()
    lesson_ref = lessons_repo.doc_ref(db, resolved.resource_id)
    old_course_ref = courses_repo.doc_ref(db, old_course_id)
    new_course_ref = courses_repo.doc_ref(db, new_course_id) if new_course_id else None
    transaction = db.transaction()

    @app_ctx.firestore.transactional
    def _txn(txn):
        lesson_snapshot = lesson_ref.get(transaction=txn)
        if not lesson_snapshot.exists:
            raise NotFoundError('Lesson not found')
        current = lesson_snapshot.to_dict() or {}
        if str(current.get('course_id', '') or '') != old_course_id:
            raise ConflictError('Lesson was moved by another request. Reload and try again.')
        updates = {'updated_at': now_ts}
        if title:
            updates['title'] = title

        if new_course_ref is not None:
            old_course_snapshot = old_course_ref.get(transaction=txn)
            new_course_snapshot = new_course_ref.get(transaction=txn)
            if not new_course_snapshot.exists:
                raise NotFoundError('Course not found')
            new_course = new_course_snapshot.to_dict() or {}
            if not entitlement_service.is_course_instructor(principal, new_course):
                raise NotAllowedError('Unauthorized instructor')
            if old_course_snapshot.exists:
                old_course = old_course_snapshot.to_dict() or {}
                txn.update(old_course_ref, {
                    'lessons_id': [item for item in (old_course.get('lessons_id') or []) if str(item) != resolved.resource_id],
                })
            new_lessons = [item for item in (new_course.get('lessons_id') or []) if str(item) != resolved.resource_id]
            new_lessons.append(resolved.resource_id)
            txn.update(new_course_ref, {'lessons_id': new_lessons})
            updates['course_id'] = new_course_id
            updates['instructor_id'] = principal.uid

        txn.update(lesson_ref, updates)
        merged = dict(current)
        merged.update(updates)
        return merged

    updated = _txn(transaction)
    log_event(
        app_ctx.logger,
        logging.INFO,
        'lesson_updated',
        uid=principal.uid,
        lesson_id=resolved.resource_id,
        moved_to=new_course_id or None,
    )
    updated['id'] = resolved.resource_id
    return updated
