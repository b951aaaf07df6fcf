"""Firestore accessors for users collection."""


def doc_ref(db, uid):
    return db.collection('users').document(uid)


def get_doc(db, uid, transaction=None):
    return doc_ref(db, uid).get(transaction=transaction)
