"""Entitlement checks for course-owned resources.

Every resource kind is first normalized to the id of the course that owns
it. The role policy then decides on the course alone:

* instructors pass when they are the course's instructor,
* learners pass when an enrollment exists and only access is requested,
* every other role is denied.
"""

from coursehub.domain import PrincipalRole, Relation, ResolvedResource, ResourceKind
from coursehub.errors import NotAllowedError, NotFoundError
from coursehub.repositories import (
    certificates_repo,
    chat_repo,
    courses_repo,
    enrollments_repo,
    lessons_repo,
    questions_repo,
    quizzes_repo,
)
from coursehub.repositories.query_utils import snapshot_to_dict


def _load(snapshot, message):
    data = snapshot_to_dict(snapshot)
    if data is None:
        raise NotFoundError(message)
    return data


def _parent_id(data, field_name, message):
    value = str(data.get(field_name, '') or '').strip()
    if not value:
        raise NotFoundError(message)
    return value


def _resolve_course(db, course_id):
    return _load(courses_repo.get_doc(db, course_id), 'Course not found'), course_id


def _resolve_direct(getter, label):
    def resolver(db, resource_id):
        data = _load(getter(db, resource_id), f'{label} not found')
        return data, _parent_id(data, 'course_id', 'Course not found')
    return resolver


def _resolve_question(db, question_id):
    data = _load(questions_repo.get_doc(db, question_id), 'Question not found')
    quiz_id = _parent_id(data, 'quiz_id', 'Quiz not found')
    quiz = _load(quizzes_repo.get_doc(db, quiz_id), 'Quiz not found')
    return data, _parent_id(quiz, 'course_id', 'Course not found')


def _resolve_chat_message(db, message_id):
    data = _load(chat_repo.get_message(db, message_id), 'Message not found')
    room_id = _parent_id(data, 'room_id', 'Chat room not found')
    room = _load(chat_repo.get_room(db, room_id), 'Chat room not found')
    return data, _parent_id(room, 'course_id', 'Course not found')


OWNING_COURSE_RESOLVERS = {
    ResourceKind.COURSE: _resolve_course,
    ResourceKind.LESSON: _resolve_direct(lessons_repo.get_doc, 'Lesson'),
    ResourceKind.QUIZ: _resolve_direct(quizzes_repo.get_doc, 'Quiz'),
    ResourceKind.QUESTION: _resolve_question,
    ResourceKind.CERTIFICATE: _resolve_direct(certificates_repo.get_doc, 'Certificate'),
    ResourceKind.CHAT_ROOM: _resolve_direct(chat_repo.get_room, 'Chat room'),
    ResourceKind.CHAT_MESSAGE: _resolve_chat_message,
}


def is_course_instructor(principal, course):
    instructor_id = str((course or {}).get('instructor_id', '') or '').strip()
    return bool(instructor_id) and principal.role is PrincipalRole.INSTRUCTOR and instructor_id == principal.uid


def _instructor_policy(db, principal, course_id, course, relation):
    return is_course_instructor(principal, course)


def _learner_policy(db, principal, course_id, course, relation):
    if relation is not Relation.ACCESS:
        return False
    return enrollments_repo.exists(db, principal.uid, course_id)


def _deny_policy(db, principal, course_id, course, relation):
    return False


ROLE_POLICIES = {
    PrincipalRole.INSTRUCTOR: _instructor_policy,
    PrincipalRole.LEARNER: _learner_policy,
    PrincipalRole.OTHER: _deny_policy,
}

_unhandled_roles = set(PrincipalRole) - set(ROLE_POLICIES)
if _unhandled_roles:
    raise RuntimeError(f"No entitlement policy for roles: {sorted(r.value for r in _unhandled_roles)}")

_unresolved_kinds = set(ResourceKind) - set(OWNING_COURSE_RESOLVERS)
if _unresolved_kinds:
    raise RuntimeError(f"No owning-course resolver for kinds: {sorted(k.value for k in _unresolved_kinds)}")


def resolve_resource(app_ctx, kind, resource_id):
    """Load a resource and the course at the top of its ancestry chain."""
    resource_id = str(resource_id or '').strip()
    if not resource_id:
        raise NotFoundError(f'{kind.label.capitalize()} not found')
    db = app_ctx.require_db()
    data, course_id = OWNING_COURSE_RESOLVERS[kind](db, resource_id)
    if kind is ResourceKind.COURSE:
        course = data
    else:
        course = _load(courses_repo.get_doc(db, course_id), 'Course not found')
    _parent_id(course, 'instructor_id', 'Course instructor not found')
    return ResolvedResource(kind=kind, resource_id=resource_id, data=data, course_id=course_id, course=course)


def is_entitled(app_ctx, principal, course_id, course, relation=Relation.ACCESS):
    policy = ROLE_POLICIES[principal.role]
    return bool(policy(app_ctx.require_db(), principal, course_id, course, relation))


def check_course_entitlement(app_ctx, principal, course_id, relation=Relation.ACCESS, denied_message=None):
    """Return the course document when the principal holds `relation` on it."""
    resolved = resolve_resource(app_ctx, ResourceKind.COURSE, course_id)
    if not is_entitled(app_ctx, principal, resolved.course_id, resolved.course, relation):
        raise NotAllowedError(denied_message or 'You are not allowed to access this course')
    return resolved.course


def authorize_resource(app_ctx, principal, kind, resource_id, relation=Relation.ACCESS, denied_message=None):
    resolved = resolve_resource(app_ctx, kind, resource_id)
    if not is_entitled(app_ctx, principal, resolved.course_id, resolved.course, relation):
        if denied_message is None:
            verb = 'modify' if relation is Relation.OWNERSHIP else 'access'
            denied_message = f'You are not allowed to {verb} this {kind.label}'
        raise NotAllowedError(denied_message)
    return resolved
