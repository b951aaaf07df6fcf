import copy
import json
import logging
import re
from types import SimpleNamespace

import pytest

from coursehub import create_app
from coursehub.config import AppConfig
from coursehub.extensions import AppContext

NOW_TS = 1_700_000_000.0


class _FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class _FakeDocRef:
    def __init__(self, db, collection_name, doc_id):
        self._db = db
        self.collection_name = collection_name
        self.id = doc_id

    def _store(self):
        return self._db.collections.setdefault(self.collection_name, {})

    def get(self, transaction=None):
        return _FakeSnapshot(self.id, copy.deepcopy(self._store().get(self.id)))

    def set(self, data, merge=False):
        store = self._store()
        if merge and self.id in store:
            store[self.id].update(copy.deepcopy(data))
        else:
            store[self.id] = copy.deepcopy(data)

    def update(self, updates):
        store = self._store()
        if self.id not in store:
            raise KeyError(f"No document to update: {self.collection_name}/{self.id}")
        store[self.id].update(copy.deepcopy(updates))

    def delete(self):
        self._store().pop(self.id, None)


class _FakeQuery:
    def __init__(self, db, collection_name, filters=None, max_results=None):
        self._db = db
        self.collection_name = collection_name
        self._filters = list(filters or [])
        self._max_results = max_results

    def where(self, *args, **kwargs):
        if 'filter' in kwargs:
            raise TypeError('filter keyword unsupported')
        return _FakeQuery(self._db, self.collection_name, self._filters + [args], self._max_results)

    def limit(self, count):
        return _FakeQuery(self._db, self.collection_name, self._filters, count)

    def _matches(self, data):
        for field_path, op_string, value in self._filters:
            if op_string == '==' and data.get(field_path) != value:
                return False
            if op_string == 'in' and data.get(field_path) not in value:
                return False
        return True

    def stream(self, transaction=None):
        results = []
        for doc_id, data in list(self._db.collections.get(self.collection_name, {}).items()):
            if self._matches(data):
                results.append(_FakeSnapshot(doc_id, copy.deepcopy(data)))
            if self._max_results is not None and len(results) >= self._max_results:
                break
        return iter(results)


class _FakeCollection(_FakeQuery):
    def document(self, doc_id):
        return _FakeDocRef(self._db, self.collection_name, doc_id)


class FakeTransaction:
    def __init__(self, db):
        self._db = db
        self._writes = []
        self.committed = False
        self.rolled_back = False

    def set(self, ref, data, merge=False):
        self._writes.append(lambda: ref.set(data, merge=merge))

    def update(self, ref, updates):
        self._writes.append(lambda: ref.update(updates))

    def delete(self, ref):
        self._writes.append(ref.delete)

    def commit(self):
        for write in self._writes:
            write()
        self.committed = True

    def rollback(self):
        self._writes = []
        self.rolled_back = True


class FakeDB:
    def __init__(self):
        self.collections = {}
        self.transactions = []

    def collection(self, name):
        return _FakeCollection(self, name)

    def transaction(self):
        txn = FakeTransaction(self)
        self.transactions.append(txn)
        return txn

    def seed(self, collection_name, doc_id, data):
        self.collections.setdefault(collection_name, {})[doc_id] = copy.deepcopy(data)

    def data(self, collection_name, doc_id):
        return copy.deepcopy(self.collections.get(collection_name, {}).get(doc_id))

    def count(self, collection_name):
        return len(self.collections.get(collection_name, {}))


class FakeFirestoreModule:
    """Stands in for `firebase_admin.firestore` in transactional code paths."""

    Query = SimpleNamespace(DESCENDING='DESCENDING', ASCENDING='ASCENDING')

    @staticmethod
    def transactional(fn):
        def wrapper(transaction, *args, **kwargs):
            try:
                result = fn(transaction, *args, **kwargs)
            except Exception:
                transaction.rollback()
                raise
            transaction.commit()
            return result
        return wrapper


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message):
        if self.fail:
            raise RuntimeError('SMTP connection refused')
        self.sent.append(message)


class FakeAuth:
    @staticmethod
    def verify_id_token(token):
        if not token.startswith('tok-'):
            raise ValueError('Invalid ID token')
        uid = token[len('tok-'):]
        return {'uid': uid, 'email': f'{uid}@example.com'}


class FakeSignatureVerificationError(Exception):
    pass


class FakeStripe:
    SignatureVerificationError = FakeSignatureVerificationError

    def __init__(self):
        self.created_sessions = []
        self.Webhook = SimpleNamespace(construct_event=self._construct_event)
        self.checkout = SimpleNamespace(Session=SimpleNamespace(create=self._create_session))

    @staticmethod
    def _construct_event(payload, sig_header, secret):
        if sig_header != 'valid-signature':
            raise FakeSignatureVerificationError('No signatures found matching the expected signature for payload')
        return json.loads(payload)

    def _create_session(self, **kwargs):
        self.created_sessions.append(kwargs)
        session_id = f'cs_test_{len(self.created_sessions)}'
        return SimpleNamespace(id=session_id, url=f'https://checkout.stripe.test/{session_id}')


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def auth_headers(uid):
    return {'Authorization': f'Bearer tok-{uid}'}


def last_code(mailer):
    match = re.search(r'\b(\d{6})\b', mailer.sent[-1].body)
    assert match is not None
    return match.group(1)


def seed_world(db):
    db.seed('users', 'inst-1', {'role': 'teacher', 'email': 'inst-1@example.com', 'name': 'Ada'})
    db.seed('users', 'inst-2', {'role': 'teacher', 'email': 'inst-2@example.com'})
    db.seed('users', 'learner-1', {'role': 'student', 'email': 'learner-1@example.com'})
    db.seed('users', 'learner-2', {'role': 'student', 'email': 'learner-2@example.com'})
    db.seed('users', 'admin-1', {'role': 'admin', 'email': 'admin-1@example.com'})

    db.seed('courses', 'course-1', {
        'instructor_id': 'inst-1',
        'title': 'Python Basics',
        'lessons_id': ['lesson-1', 'lesson-2'],
        'quizzes_id': ['quiz-1'],
        'price_cents': 1999,
        'currency': 'eur',
    })
    db.seed('courses', 'course-2', {'instructor_id': 'inst-1', 'title': 'Python Advanced', 'lessons_id': [], 'quizzes_id': []})
    db.seed('courses', 'course-3', {'instructor_id': 'inst-2', 'title': 'Rust Basics', 'lessons_id': ['lesson-9'], 'quizzes_id': []})

    db.seed('lessons', 'lesson-1', {'course_id': 'course-1', 'instructor_id': 'inst-1', 'title': 'Intro'})
    db.seed('lessons', 'lesson-2', {'course_id': 'course-1', 'instructor_id': 'inst-1', 'title': 'Variables'})
    db.seed('lessons', 'lesson-9', {'course_id': 'course-3', 'instructor_id': 'inst-2', 'title': 'Ownership'})

    db.seed('quizzes', 'quiz-1', {'course_id': 'course-1', 'title': 'Week 1', 'questions_id': ['question-1', 'question-2']})
    db.seed('questions', 'question-1', {'quiz_id': 'quiz-1', 'question_text': 'What is a list?', 'options': ['a', 'b'], 'answer': 'a'})
    db.seed('questions', 'question-2', {'quiz_id': 'quiz-1', 'question_text': 'What is a dict?', 'options': ['a', 'b'], 'answer': 'b'})

    db.seed('certificates', 'cert-1', {'course_id': 'course-1', 'student_id': 'learner-1', 'title': 'Python Basics completion'})

    db.seed('enrolled_courses', 'learner-1__course-1', {'uid': 'learner-1', 'course_id': 'course-1', 'source': 'manual'})

    db.seed('chat_rooms', 'room-1', {'course_id': 'course-1', 'name': 'General', 'members': ['inst-1', 'learner-1']})
    db.seed('chat_messages', 'msg-1', {'room_id': 'room-1', 'sender_id': 'learner-1', 'text': 'hello'})
    db.seed('chat_messages', 'msg-2', {'room_id': 'room-1', 'sender_id': 'learner-3', 'text': 'spam'})


@pytest.fixture()
def db():
    fake_db = FakeDB()
    seed_world(fake_db)
    return fake_db


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def fake_stripe():
    return FakeStripe()


@pytest.fixture()
def clock():
    return FakeClock(NOW_TS)


@pytest.fixture()
def app_ctx(db, mailer, fake_stripe, clock):
    config = AppConfig(
        runtime_env='test',
        stripe_webhook_secret='whsec_test',
        public_base_url='https://coursehub.test',
        mail_default_sender='no-reply@coursehub.test',
    )
    return AppContext(
        config=config,
        db=db,
        firestore=FakeFirestoreModule(),
        auth=FakeAuth(),
        mailer=mailer,
        stripe=fake_stripe,
        logger=logging.getLogger('coursehub.tests'),
        clock=clock,
    )


@pytest.fixture()
def app(app_ctx):
    flask_app = create_app(config=app_ctx.config, app_ctx=app_ctx)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture()
def principals(app_ctx):
    from coursehub.domain import Principal

    loaded = {}
    for uid in ('inst-1', 'inst-2', 'learner-1', 'learner-2', 'admin-1'):
        loaded[uid] = Principal.from_user_doc(uid, app_ctx.db.data('users', uid))
    return loaded
