"""Firestore accessors for quizzes collection."""


def doc_ref(db, quiz_id):
    return db.collection('quizzes').document(quiz_id)


def get_doc(db, quiz_id, transaction=None):
    return doc_ref(db, quiz_id).get(transaction=transaction)
