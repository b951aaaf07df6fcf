"""Firestore accessors for enrolled_courses collection.

One document per (learner, course); the id is derived from both so that an
enrollment lookup is a single document read and creation is idempotent.
"""


def enrollment_id(uid, course_id):
    return f"{uid}__{course_id}"


def doc_ref(db, uid, course_id):
    return db.collection('enrolled_courses').document(enrollment_id(uid, course_id))


def get_doc(db, uid, course_id, transaction=None):
    return doc_ref(db, uid, course_id).get(transaction=transaction)


def exists(db, uid, course_id):
    return bool(get_doc(db, uid, course_id).exists)
