"""Firestore accessors for certificates collection."""


def doc_ref(db, certificate_id):
    return db.collection('certificates').document(certificate_id)


def get_doc(db, certificate_id, transaction=None):
    return doc_ref(db, certificate_id).get(transaction=transaction)
