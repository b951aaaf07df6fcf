"""Firestore accessors for lessons collection."""

from .query_utils import apply_equals, first_doc


def doc_ref(db, lesson_id):
    return db.collection('lessons').document(lesson_id)


def get_doc(db, lesson_id, transaction=None):
    return doc_ref(db, lesson_id).get(transaction=transaction)


def find_by_title(db, instructor_id, course_id, title):
    query = apply_equals(db.collection('lessons'), instructor_id=instructor_id, course_id=course_id, title=title)
    return first_doc(query)
