"""Core value types shared by services and blueprints."""

from dataclasses import dataclass
from enum import Enum


class PrincipalRole(str, Enum):
    INSTRUCTOR = 'instructor'
    LEARNER = 'learner'
    OTHER = 'other'

    @classmethod
    def from_raw(cls, raw_role):
        """Map a stored role string to a role; unknown values become OTHER."""
        role = str(raw_role or '').strip().lower()
        if role in {'teacher', 'instructor'}:
            return cls.INSTRUCTOR
        if role in {'student', 'learner'}:
            return cls.LEARNER
        return cls.OTHER


class Relation(str, Enum):
    """What the principal needs with respect to the owning course."""

    ACCESS = 'access'
    OWNERSHIP = 'ownership'


class ResourceKind(str, Enum):
    COURSE = 'course'
    LESSON = 'lesson'
    QUIZ = 'quiz'
    QUESTION = 'question'
    CERTIFICATE = 'certificate'
    CHAT_ROOM = 'chat_room'
    CHAT_MESSAGE = 'chat_message'

    @property
    def label(self):
        return self.value.replace('_', ' ')


class VerifyReason(str, Enum):
    UPDATE_PASSWORD_VERIFIED = 'update-password-verified'
    UPDATE_EMAIL = 'update-email'
    UPDATE_PASSWORD = 'update-password'
    DELETE_QUESTION = 'delete-question'
    DELETE_COURSE = 'delete-course'
    DELETE_LESSON = 'delete-lesson'
    DELETE_REVIEW = 'delete-review'
    DELETE_VIDEO = 'delete-video'
    DELETE_CERTIFICATE = 'delete-certificate'
    DELETE_QUIZ = 'delete-quiz'
    SIGNUP = 'signup'


@dataclass(frozen=True)
class Principal:
    uid: str
    role: PrincipalRole
    email: str = ''
    name: str = ''

    @classmethod
    def from_user_doc(cls, uid, data):
        data = data or {}
        return cls(
            uid=uid,
            role=PrincipalRole.from_raw(data.get('role')),
            email=str(data.get('email', '') or '').strip(),
            name=str(data.get('name', '') or '').strip(),
        )


@dataclass(frozen=True)
class ResolvedResource:
    """A resource document together with the course that owns it."""

    kind: ResourceKind
    resource_id: str
    data: dict
    course_id: str
    course: dict

    def to_payload(self):
        payload = dict(self.data)
        payload['id'] = self.resource_id
        return payload


@dataclass(frozen=True)
class IssuedCode:
    reason: VerifyReason
    target_id: str
    expires_at: float
