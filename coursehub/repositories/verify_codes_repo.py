"""Firestore accessors for verify_codes collection."""

import hashlib


def code_doc_id(uid, reason, target_id):
    raw = f"{uid}|{reason}|{target_id}".encode('utf-8')
    return hashlib.sha256(raw).hexdigest()


def doc_ref(db, uid, reason, target_id):
    return db.collection('verify_codes').document(code_doc_id(uid, reason, target_id))


def get_doc(db, uid, reason, target_id, transaction=None):
    return doc_ref(db, uid, reason, target_id).get(transaction=transaction)


def delete_doc(db, uid, reason, target_id):
    return doc_ref(db, uid, reason, target_id).delete()
