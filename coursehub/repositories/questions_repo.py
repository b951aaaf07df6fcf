"""Firestore accessors for questions collection."""

from .query_utils import apply_where


def doc_ref(db, question_id):
    return db.collection('questions').document(question_id)


def get_doc(db, question_id, transaction=None):
    return doc_ref(db, question_id).get(transaction=transaction)


def list_by_quiz(db, quiz_id, limit=None, transaction=None):
    query = apply_where(db.collection('questions'), 'quiz_id', '==', quiz_id)
    if limit is not None:
        query = query.limit(limit)
    return list(query.stream(transaction=transaction))
