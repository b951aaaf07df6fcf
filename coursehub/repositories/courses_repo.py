"""Firestore accessors for courses collection."""


def doc_ref(db, course_id):
    return db.collection('courses').document(course_id)


def get_doc(db, course_id, transaction=None):
    return doc_ref(db, course_id).get(transaction=transaction)
